"""SQLite connection and schema migrations for the metastore mirror."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from ucsync.core.errors import MigrationError

log = logging.getLogger(__name__)

_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS _migrations (
    version TEXT PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open (and create if needed) the mirror database.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        A connection returning `sqlite3.Row` rows.
    """
    db_path = Path(db_path)
    if not db_path.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)
        log.info("Creating database %s", db_path)

    try:
        conn = sqlite3.connect(str(db_path))
    except sqlite3.Error as exc:
        raise MigrationError(f"Cannot open database {db_path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    return conn


def applied_migrations(conn: sqlite3.Connection) -> set[str]:
    conn.execute(_MIGRATIONS_TABLE)
    return {row[0] for row in conn.execute("SELECT version FROM _migrations")}


def run_migrations(conn: sqlite3.Connection, migrations_path: str | Path) -> list[str]:
    """Apply pending `*.sql` migrations in file-name order.

    Each file runs at most once, in its own transaction together with its
    `_migrations` row, so a failing script leaves no partial schema behind.
    Scripts must not issue BEGIN or COMMIT themselves. Returns the versions
    applied by this call.
    """
    path = Path(migrations_path)
    if not path.is_dir():
        raise MigrationError(f"Migrations directory not found: {path}")

    log.info("Running migrations from %s", path)
    done = applied_migrations(conn)
    applied: list[str] = []

    for script in sorted(path.glob("*.sql")):
        version = script.stem
        if version in done:
            continue
        try:
            conn.executescript("BEGIN;\n" + script.read_text(encoding="utf-8"))
            conn.execute("INSERT INTO _migrations (version) VALUES (?)", (version,))
            conn.commit()
        except (OSError, sqlite3.Error) as exc:
            conn.rollback()
            log.error("Migration %s failed: %s", version, exc)
            raise MigrationError(f"Migration {version} failed: {exc}") from exc
        log.info("Applied migration %s", version)
        applied.append(version)

    if not applied:
        log.info("Database schema is up to date")
    return applied


@contextmanager
def open_database(
    db_path: str | Path, migrations_path: str | Path
) -> Generator[sqlite3.Connection, None, None]:
    """Connect, migrate and close the database around a block."""
    conn = connect(db_path)
    try:
        run_migrations(conn, migrations_path)
        yield conn
    finally:
        conn.close()
