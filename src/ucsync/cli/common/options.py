"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help=(
        "Databricks CLI profile (from ~/.databrickscfg), used when DB_TOKEN/WORKSPACE_NAME "
        "are unset. Only personal access token profiles are supported."
    ),
)

DatabaseOpt = typer.Option(
    None,
    "--db",
    help="SQLite database path or sqlite:// URL (default: $DATABASE_URL or ucsync.db)",
)

MigrationsOpt = typer.Option(
    None,
    "--migrations",
    help="Directory of .sql migrations (default: $MIGRATIONS_PATH or ./migrations)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging",
)

PhaseOpt = typer.Option(
    [],
    "--phase",
    help="Phase to run (catalogs, schemas, tables). Reusable; default is all three in order.",
    show_default=False,
)

PacingOpt = typer.Option(
    None,
    "--pacing",
    min=0.0,
    help="Seconds to wait between per-catalog schema requests (default: $UCSYNC_PACING_SECONDS or 1)",
)

AtomicOpt = typer.Option(
    False,
    "--atomic",
    help="Write each fetched collection in a single transaction (all-or-nothing)",
)

StrictOpt = typer.Option(
    False,
    "--strict",
    help="Exit with code 1 if any phase failed",
)
