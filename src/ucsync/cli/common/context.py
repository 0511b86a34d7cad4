"""Application context management for the CLI."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from ucsync.cli.common.exits import die
from ucsync.core.adapters.transport import HttpTransport
from ucsync.core.adapters.unitycatalog import UnityCatalogAdapter
from ucsync.core.config import Settings, load_settings, resolve_storage_paths
from ucsync.core.errors import ConfigError, MigrationError, SyncError
from ucsync.core.exclusion import ExclusionPolicy
from ucsync.core.mirror import Mirror
from ucsync.core.storage import connect, run_migrations
from ucsync.core.sync import MetastoreSync, fixed_pacing


@dataclass(frozen=True)
class CLIOptions:
    """Global options captured by the root callback."""

    profile: str | None = None
    database: str | None = None
    migrations: str | None = None


@dataclass
class DatabaseContext:
    """An open, migrated mirror database."""

    conn: sqlite3.Connection
    mirror: Mirror
    applied: list[str]

    def close(self) -> None:
        self.conn.close()


@dataclass
class SyncAppContext:
    """Everything a sync command needs: settings, API adapter and mirror."""

    settings: Settings
    transport: HttpTransport
    adapter: UnityCatalogAdapter
    db: DatabaseContext
    sync: MetastoreSync

    def close(self) -> None:
        self.transport.close()
        self.db.close()


def open_mirror_db(
    opts: CLIOptions,
    *,
    policy: ExclusionPolicy | None = None,
    atomic: bool = False,
) -> DatabaseContext:
    """Open and migrate the mirror database, exiting on bootstrap errors."""
    try:
        db_path, migrations_path = resolve_storage_paths(
            database=opts.database, migrations=opts.migrations
        )
        conn = connect(db_path)
    except (ConfigError, MigrationError) as exc:
        die(str(exc), code=1)
    try:
        applied = run_migrations(conn, migrations_path)
    except MigrationError as exc:
        conn.close()
        die(str(exc), code=1)
    return DatabaseContext(
        conn=conn,
        mirror=Mirror(conn, policy=policy or ExclusionPolicy(), atomic=atomic),
        applied=applied,
    )


def build_adapter(opts: CLIOptions) -> UnityCatalogAdapter:
    """Build a Unity Catalog adapter without touching the database."""
    try:
        settings = load_settings(opts.profile)
    except SyncError as exc:
        die(str(exc), code=1)
    transport = HttpTransport(settings.credentials, timeout=settings.request_timeout)
    return UnityCatalogAdapter(transport)


def build_sync_context(
    opts: CLIOptions,
    *,
    pacing_seconds: float | None = None,
    atomic: bool = False,
) -> SyncAppContext:
    """Build the full sync context (credentials, transport, migrated database)."""
    try:
        settings = load_settings(
            opts.profile, database=opts.database, migrations=opts.migrations
        )
    except SyncError as exc:
        die(str(exc), code=1)

    policy = ExclusionPolicy.with_extra_names(settings.excluded_catalogs)
    db = open_mirror_db(opts, policy=policy, atomic=atomic)

    transport = HttpTransport(settings.credentials, timeout=settings.request_timeout)
    adapter = UnityCatalogAdapter(transport)
    interval = settings.pacing_seconds if pacing_seconds is None else pacing_seconds
    sync = MetastoreSync(
        adapter,
        db.mirror,
        policy=policy,
        pacing=fixed_pacing(interval),
    )
    return SyncAppContext(
        settings=settings,
        transport=transport,
        adapter=adapter,
        db=db,
        sync=sync,
    )
