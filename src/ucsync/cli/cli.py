"""CLI application for mirroring Unity Catalog metadata."""

import typer
from dotenv import load_dotenv

from ucsync.cli.commands.sync import migrate, sync
from ucsync.cli.commands.unitycatalog import catalogs_search, table_show
from ucsync.cli.common.context import CLIOptions
from ucsync.cli.common.logs import setup_logging
from ucsync.cli.common.options import (
    DatabaseOpt,
    MigrationsOpt,
    ProfileOpt,
    VerboseOpt,
)

app = typer.Typer(
    help="ucsync - mirror Unity Catalog metadata into SQLite",
    no_args_is_help=True,
)


@app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    verbose: bool = VerboseOpt,
):
    """Load .env, configure logging and capture global options."""
    load_dotenv()
    setup_logging(verbose)
    ctx.obj = CLIOptions(profile=profile, database=database, migrations=migrations)


app.command("sync")(sync)
app.command("migrate")(migrate)
app.command("catalogs-search")(catalogs_search)
app.command("table-show")(table_show)


if __name__ == "__main__":
    app()
