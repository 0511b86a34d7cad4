"""Commands that build and refresh the local metastore mirror."""

from __future__ import annotations

import math

import typer

from ucsync.cli.common.context import CLIOptions, build_sync_context, open_mirror_db
from ucsync.cli.common.exits import exit_for_outcomes
from ucsync.cli.common.options import AtomicOpt, PacingOpt, PhaseOpt, StrictOpt
from ucsync.cli.common.output import out
from ucsync.cli.common.progress import catalog_progress
from ucsync.core.mirror import MIRRORED_TABLES
from ucsync.core.sync import run_phases

PHASES = ("catalogs", "schemas", "tables")


def sync(
    ctx: typer.Context,
    phase: list[str] = PhaseOpt,
    pacing: float | None = PacingOpt,
    atomic: bool = AtomicOpt,
    strict: bool = StrictOpt,
):
    """Mirror catalogs, schemas and tables into the local database."""
    opts: CLIOptions = ctx.obj
    unknown = [p for p in phase if p not in PHASES]
    if unknown:
        out.error(f"Unknown phase(s): {', '.join(unknown)}. Use: {', '.join(PHASES)}")
        raise typer.Exit(2)
    if pacing is not None and not math.isfinite(pacing):
        out.error("--pacing must be a finite number of seconds.")
        raise typer.Exit(2)
    # keep the canonical order whatever order --phase was given in
    phases = [p for p in PHASES if not phase or p in phase]

    appctx = build_sync_context(opts, pacing_seconds=pacing, atomic=atomic)
    ctx.call_on_close(appctx.close)

    out.header("Unity Catalog sync")
    out.kv(
        {
            "Workspace": appctx.settings.credentials.host,
            "Database": appctx.settings.database_path,
            "Phases": ", ".join(phases),
        }
    )

    with catalog_progress() as on_progress:
        outcomes = run_phases(appctx.sync, phases, on_progress=on_progress)

    out.phase_results_table(outcomes)
    counts = {t: appctx.db.mirror.count(t) for t in MIRRORED_TABLES}
    out.info(
        "Mirror now holds "
        + ", ".join(f"{n} {t}" for t, n in counts.items())
    )
    exit_for_outcomes(outcomes, strict=strict)


def migrate(ctx: typer.Context):
    """Create the database (if needed) and apply pending migrations."""
    opts: CLIOptions = ctx.obj
    db = open_mirror_db(opts)
    ctx.call_on_close(db.close)
    if db.applied:
        out.info(f"Applied: {', '.join(db.applied)}")
    out.success("Database schema is up to date.")
