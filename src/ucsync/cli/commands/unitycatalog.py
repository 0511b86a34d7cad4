"""Read-only Unity Catalog commands (mirror lookups and single-table fetch)."""

from __future__ import annotations

import typer

from ucsync.cli.common.context import CLIOptions, build_adapter, open_mirror_db
from ucsync.cli.common.exits import exit_from_exc
from ucsync.cli.common.output import out
from ucsync.core.errors import DecodeError, PersistenceError, TransportError


def catalogs_search(
    ctx: typer.Context,
    term: str | None = typer.Argument(
        None, help="Substring to look for in catalog names (all catalogs if omitted)"
    ),
):
    """Search catalog names in the local mirror."""
    opts: CLIOptions = ctx.obj
    db = open_mirror_db(opts)
    ctx.call_on_close(db.close)

    try:
        names = db.mirror.search_catalogs(term)
    except PersistenceError as exc:
        exit_from_exc(exc, message=f"Catalog search failed: {exc}", code=1)

    if not names:
        out.warn("No catalogs found.")
        raise typer.Exit(0)

    out.header("Catalogs")
    out.info(f"Catalogs: {len(names)}")
    out.catalogs_table(names, title="Mirrored catalogs")


def table_show(
    ctx: typer.Context,
    full_name: str = typer.Argument(..., help="Table in the form catalog.schema.table"),
):
    """Fetch one table from Unity Catalog and print its mirrored fields."""
    opts: CLIOptions = ctx.obj
    parts = full_name.strip().split(".")
    if len(parts) != 3 or not all(parts):
        out.error("Table must be in the form `catalog.schema.table`.")
        raise typer.Exit(2)

    adapter = build_adapter(opts)
    ctx.call_on_close(adapter.transport.close)

    try:
        with out.status("Loading table..."):
            table = adapter.get_table(full_name.strip())
    except TransportError as exc:
        if exc.status_code == 404:
            exit_from_exc(exc, message=f"Table '{full_name}' does not exist.", code=1)
        if exc.status_code == 403:
            exit_from_exc(exc, message=f"No permission to access table '{full_name}'.", code=1)
        exit_from_exc(exc, message=f"Request failed: {exc}", code=1)
    except DecodeError as exc:
        exit_from_exc(exc, message=f"Unexpected response: {exc}", code=1)

    out.header(table.full_name or full_name)
    out.kv({k: v for k, v in zip(table.columns(), table.values()) if v is not None})
