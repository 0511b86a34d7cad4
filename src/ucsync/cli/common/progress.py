"""Progress formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ucsync.cli.common.output import console
from ucsync.core.sync import ProgressCallback


@contextmanager
def catalog_progress(label: str = "Tables") -> Iterator[ProgressCallback]:
    """
    Show a progress bar of catalogs processed during the tables phase.

    Yields a `(processed, total)` callback for `MetastoreSync.sync_all_tables`.
    The total is only known once the catalog list has been fetched, so the
    task starts indeterminate and gets its total on the first update.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn(f"[bold]{label}[/]"),
        BarColumn(),
        MofNCompleteColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(label, total=None)

    def _update(processed: int, total: int) -> None:
        progress.update(task_id, completed=processed, total=max(total, 1))

    with progress:
        yield _update
