import pytest

from ucsync.core.errors import MigrationError
from ucsync.core.storage import connect, open_database, run_migrations


def _tables(conn) -> set[str]:
    return {
        r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }


def test_connect_creates_parent_directories(tmp_path):
    path = tmp_path / "nested" / "dir" / "mirror.db"

    conn = connect(path)
    conn.close()

    assert path.exists()


def test_migrations_apply_once(tmp_path, migrations_path):
    conn = connect(tmp_path / "mirror.db")

    assert run_migrations(conn, migrations_path) == ["0001_create_metastore_tables"]
    assert run_migrations(conn, migrations_path) == []
    assert {"catalogs", "schemas", "tables", "_migrations"} <= _tables(conn)
    conn.close()


def test_migrations_run_in_file_name_order(tmp_path):
    scripts = tmp_path / "migrations"
    scripts.mkdir()
    (scripts / "0002_add_index.sql").write_text(
        "CREATE INDEX idx_t_name ON t(name);", encoding="utf-8"
    )
    (scripts / "0001_create.sql").write_text(
        "CREATE TABLE t (name TEXT);", encoding="utf-8"
    )
    conn = connect(tmp_path / "mirror.db")

    assert run_migrations(conn, scripts) == ["0001_create", "0002_add_index"]
    conn.close()


def test_failed_migration_raises_and_is_not_recorded(tmp_path):
    scripts = tmp_path / "migrations"
    scripts.mkdir()
    (scripts / "0001_broken.sql").write_text("CREATE TABLE (;", encoding="utf-8")
    conn = connect(tmp_path / "mirror.db")

    with pytest.raises(MigrationError, match="0001_broken"):
        run_migrations(conn, scripts)

    assert list(conn.execute("SELECT version FROM _migrations")) == []
    conn.close()


def test_failed_migration_leaves_no_partial_schema(tmp_path):
    scripts = tmp_path / "migrations"
    scripts.mkdir()
    (scripts / "0001_half.sql").write_text(
        "CREATE TABLE first_half (name TEXT);\nCREATE TABLE (;", encoding="utf-8"
    )
    conn = connect(tmp_path / "mirror.db")

    with pytest.raises(MigrationError):
        run_migrations(conn, scripts)

    assert "first_half" not in _tables(conn)
    conn.close()


def test_missing_migrations_directory(tmp_path):
    conn = connect(tmp_path / "mirror.db")

    with pytest.raises(MigrationError, match="not found"):
        run_migrations(conn, tmp_path / "nope")
    conn.close()


def test_open_database_migrates(tmp_path, migrations_path):
    with open_database(tmp_path / "mirror.db", migrations_path) as conn:
        assert "tables" in _tables(conn)
