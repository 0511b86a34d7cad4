"""Exit handling utilities for the CLI."""

from typing import NoReturn, Sequence

import typer

from ucsync.cli.common.output import out
from ucsync.core.sync import PhaseOutcome


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 1) -> NoReturn:
    """Print an error message and exit, chaining the original exception."""
    out.error(message)
    raise typer.Exit(code) from exc


def exit_for_outcomes(outcomes: Sequence[PhaseOutcome], *, strict: bool) -> None:
    """
    Finish a sync command.

    Failed phases are reported but only change the exit code with `strict`,
    since each phase is independent and a later phase may still have done
    useful work.
    """
    failed = [o.phase for o in outcomes if not o.ok]
    if not failed:
        out.success(f"Synced {len(outcomes)} phase(s).")
        return
    msg = f"{len(failed)} phase(s) failed: {', '.join(failed)}"
    if strict:
        die(msg, code=1)
    out.warn(msg)
