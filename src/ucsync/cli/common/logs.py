"""Logging setup for the CLI."""

import logging

from rich.logging import RichHandler

from ucsync.cli.common.output import console

_NOISY_LOGGERS = ("urllib3", "databricks.sdk")


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging with a Rich handler on the shared console."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
