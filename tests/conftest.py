from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

MIGRATIONS = ROOT / "migrations"

from ucsync.core.mirror import Mirror  # noqa: E402
from ucsync.core.storage import connect, run_migrations  # noqa: E402


@pytest.fixture
def migrations_path() -> Path:
    return MIGRATIONS


@pytest.fixture
def db(tmp_path):
    conn = connect(tmp_path / "mirror.db")
    run_migrations(conn, MIGRATIONS)
    yield conn
    conn.close()


@pytest.fixture
def mirror(db) -> Mirror:
    return Mirror(db)
