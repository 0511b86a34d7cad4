import time

import pytest

from ucsync.core.adapters.unitycatalog import UnityCatalogAdapter
from ucsync.core.errors import DecodeError, PersistenceError, TransportError
from ucsync.core.mirror import Mirror
from ucsync.core.sync import (
    MetastoreSync,
    fixed_pacing,
    no_pacing,
    run_phases,
)

from uc_payloads import FakeWorkspace, LockedConnection, catalog, schema, table


def _workspace(**kwargs) -> FakeWorkspace:
    return FakeWorkspace(
        catalogs=[
            catalog("main"),
            catalog("partner_share", "DELTASHARING_CATALOG"),
            catalog("__databricks_internal", "SYSTEM_CATALOG"),
            catalog("adrian_hive_test"),
            catalog("next_gen", "SOME_FUTURE_CATALOG"),
        ],
        schemas={
            "main": [schema("main", "sales"), schema("main", "empty")],
            "partner_share": [schema("partner_share", "leaked")],
            "next_gen": [schema("next_gen", "raw")],
        },
        tables={
            ("main", "sales"): [table("main", "sales", "orders"), table("main", "sales", "items")],
            ("main", "empty"): None,
            ("partner_share", "leaked"): [table("partner_share", "leaked", "x")],
            ("next_gen", "raw"): [table("next_gen", "raw", "events")],
        },
        **kwargs,
    )


class _RecordingMirror:
    """Wraps a real mirror and logs writes into the shared event list."""

    def __init__(self, mirror, events: list):
        self.mirror = mirror
        self.events = events

    def write_catalogs(self, catalogs):
        self.events.append(("write_catalogs",))
        return self.mirror.write_catalogs(catalogs)

    def write_schemas(self, schemas):
        self.events.append(("write_schemas", tuple(s.name for s in schemas.items())))
        return self.mirror.write_schemas(schemas)

    def write_tables(self, tables):
        self.events.append(("write_tables", tuple(t.name for t in tables.items())))
        return self.mirror.write_tables(tables)


def _sync(ws, mirror, **kwargs) -> MetastoreSync:
    kwargs.setdefault("pacing", no_pacing)
    return MetastoreSync(UnityCatalogAdapter(ws), mirror, **kwargs)


def test_sync_catalogs_writes_only_included(mirror):
    result = _sync(_workspace(), mirror).sync_catalogs()

    assert mirror.search_catalogs() == ["main", "next_gen"]
    assert result.phase == "catalogs"
    assert result.catalogs == 5
    assert result.rows_written == 2


def test_sync_catalogs_decode_error_leaves_table_unchanged(db, mirror):
    _sync(_workspace(), mirror).sync_catalogs()
    before = [tuple(r) for r in db.execute("SELECT * FROM catalogs ORDER BY name")]

    broken = _workspace(raw={"catalogs": '{"catalogs": [{"name": "main"'})
    with pytest.raises(DecodeError):
        _sync(broken, mirror).sync_catalogs()

    after = [tuple(r) for r in db.execute("SELECT * FROM catalogs ORDER BY name")]
    assert after == before


def test_sync_catalogs_decode_error_on_empty_mirror_writes_nothing(mirror):
    broken = _workspace(raw={"catalogs": "not json"})

    with pytest.raises(DecodeError):
        _sync(broken, mirror).sync_catalogs()

    assert mirror.count("catalogs") == 0


def test_sync_all_schemas_skips_excluded_catalogs(mirror):
    ws = _workspace()

    result = _sync(ws, mirror).sync_all_schemas()

    assert ws.requested("schemas") == ["main", "next_gen"]
    assert ws.requested("tables") == []
    assert mirror.count("schemas") == 3
    assert result.catalogs == 2
    assert result.schemas == 3


def test_sync_all_schemas_paces_between_catalogs(mirror):
    clock = [0.0]
    ws = _workspace(clock=lambda: clock[0])
    sleeps: list[float] = []

    def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)
        clock[0] += seconds

    _sync(ws, mirror, pacing=fixed_pacing(1.0), sleep=fake_sleep).sync_all_schemas()

    schema_times = [t for t, key in ws.timed if key.startswith("schemas?")]
    assert sleeps == [1.0]
    assert schema_times[1] - schema_times[0] >= 1.0


def test_sync_all_schemas_pacing_uses_real_time(mirror):
    ws = _workspace(clock=time.monotonic)

    _sync(ws, mirror, pacing=fixed_pacing(0.05)).sync_all_schemas()

    schema_times = [t for t, key in ws.timed if key.startswith("schemas?")]
    assert schema_times[1] - schema_times[0] >= 0.05


def test_default_pacing_is_one_second(mirror):
    sleeps: list[float] = []
    sync = MetastoreSync(UnityCatalogAdapter(_workspace()), mirror, sleep=sleeps.append)

    sync.sync_all_schemas()

    assert sleeps == [1.0]


def test_sync_all_schemas_aborts_on_first_failure(mirror):
    ws = _workspace(fail={"schemas?main"})

    with pytest.raises(TransportError):
        _sync(ws, mirror).sync_all_schemas()

    assert ws.requested("schemas") == ["main"]
    assert mirror.count("schemas") == 0


def test_sync_all_tables_fetches_only_included_subtrees(mirror):
    ws = _workspace()

    result = _sync(ws, mirror).sync_all_tables()

    assert ws.requested("schemas") == ["main", "next_gen"]
    assert ws.requested("tables") == ["main.sales", "main.empty", "next_gen.raw"]
    assert mirror.count("tables") == 3
    assert result.tables == 3
    assert result.schemas == 3
    assert result.catalogs == 2


def test_sync_all_tables_is_depth_first_and_writes_after_each_fetch(mirror):
    events: list = []
    ws = _workspace(events=events)

    _sync(ws, _RecordingMirror(mirror, events)).sync_all_tables()

    assert events == [
        ("GET", "catalogs"),
        ("GET", "schemas?main"),
        ("GET", "tables?main.sales"),
        ("write_tables", ("orders", "items")),
        ("GET", "tables?main.empty"),
        ("GET", "schemas?next_gen"),
        ("GET", "tables?next_gen.raw"),
        ("write_tables", ("events",)),
    ]


def test_sync_all_schemas_writes_after_each_fetch(mirror):
    events: list = []
    ws = _workspace(events=events)

    _sync(ws, _RecordingMirror(mirror, events)).sync_all_schemas()

    assert events == [
        ("GET", "catalogs"),
        ("GET", "schemas?main"),
        ("write_schemas", ("sales", "empty")),
        ("GET", "schemas?next_gen"),
        ("write_schemas", ("raw",)),
    ]


def test_sync_all_tables_reports_progress_over_all_catalogs(mirror):
    seen: list[tuple[int, int]] = []

    _sync(_workspace(), mirror).sync_all_tables(on_progress=lambda i, n: seen.append((i, n)))

    assert seen == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]


def test_sync_all_tables_does_not_pace(mirror):
    sleeps: list[float] = []

    _sync(_workspace(), mirror, pacing=fixed_pacing(1.0), sleep=sleeps.append).sync_all_tables()

    assert sleeps == []


def test_sync_all_tables_aborts_on_table_fetch_failure(mirror):
    ws = _workspace(fail={"tables?main.empty"})

    with pytest.raises(TransportError):
        _sync(ws, mirror).sync_all_tables()

    # rows written before the failure stay, later catalogs are never visited
    assert mirror.count("tables") == 2
    assert ws.requested("schemas") == ["main"]


def test_run_phases_continues_after_a_failed_phase(mirror):
    ws = _workspace(fail={"schemas?next_gen"})

    outcomes = run_phases(_sync(ws, mirror))

    assert [(o.phase, o.ok) for o in outcomes] == [
        ("catalogs", True),
        ("schemas", False),
        ("tables", False),
    ]
    assert isinstance(outcomes[1].error, TransportError)
    assert mirror.count("catalogs") == 2
    # the tables phase still ran and wrote main's tables before failing
    assert mirror.count("tables") == 2


def test_run_phases_subset_and_unknown(mirror):
    sync = _sync(_workspace(), mirror)

    outcomes = run_phases(sync, ["tables"])

    assert [(o.phase, o.ok) for o in outcomes] == [("tables", True)]
    assert outcomes[0].result.tables == 3
    assert mirror.count("catalogs") == 0
    with pytest.raises(ValueError, match="Unknown phase"):
        run_phases(sync, ["columns"])


def test_run_phases_attempts_every_phase_when_commits_fail(db):
    ws = _workspace()

    outcomes = run_phases(_sync(ws, Mirror(LockedConnection(db))))

    assert [(o.phase, o.ok) for o in outcomes] == [
        ("catalogs", False),
        ("schemas", False),
        ("tables", False),
    ]
    assert all(isinstance(o.error, PersistenceError) for o in outcomes)
    assert ws.requested("schemas") == ["main", "main"]


def test_run_phases_records_unexpected_errors(mirror):
    ws = FakeWorkspace(catalogs=[catalog("")])

    outcomes = run_phases(_sync(ws, mirror))

    assert [(o.phase, o.ok) for o in outcomes] == [
        ("catalogs", True),
        ("schemas", False),
        ("tables", False),
    ]
    assert isinstance(outcomes[1].error, ValueError)


def test_fixed_pacing():
    pacing = fixed_pacing(2.0)

    assert pacing(0) == 0.0
    assert pacing(1) == 2.0
    assert pacing(7) == 2.0
    assert no_pacing(3) == 0.0
    with pytest.raises(ValueError):
        fixed_pacing(-1)
    with pytest.raises(ValueError):
        fixed_pacing(float("inf"))
