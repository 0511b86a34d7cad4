"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def phase_results_table(
        self, outcomes: Iterable[Any], title: str = "Sync results"
    ) -> None:
        """
        Render one row per sync phase.

        Expects objects with `.phase`, `.ok`, `.result` (SyncResult | None)
        and `.error` (like ucsync.core.sync.PhaseOutcome).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Phase", style="title", no_wrap=True)
        t.add_column("Catalogs", justify="right")
        t.add_column("Schemas", justify="right")
        t.add_column("Tables", justify="right")
        t.add_column("Rows written", justify="right")
        t.add_column("Result")

        for o in outcomes:
            r = getattr(o, "result", None)
            if getattr(o, "ok", False) and r is not None:
                t.add_row(
                    o.phase,
                    str(r.catalogs),
                    str(r.schemas),
                    str(r.tables),
                    str(r.rows_written),
                    "[ok]OK[/]",
                )
            else:
                t.add_row(o.phase, "", "", "", "", f"[err]FAIL[/] {o.error}")

        console.print(t)

    def catalogs_table(self, names: Iterable[str], title: str = "Catalogs") -> None:
        """Render a table of mirrored catalog names."""
        t = Table(title=title, show_lines=False)
        t.add_column("Catalog", style="ok")

        for name in names:
            t.add_row(str(name))

        console.print(t)


out = Out()
