"""Top-down traversal of the metastore tree into the local mirror.

Three phases, meant to run in order and each restartable on its own:

    sync_catalogs     catalogs -> catalogs table
    sync_all_schemas  catalogs -> schemas per included catalog (paced)
    sync_all_tables   catalogs -> schemas -> tables per schema

Traversal is depth-first and strictly sequential: a node's rows are written
right after it is fetched, before its next sibling is fetched, and children
of an excluded catalog are never requested. Any fetch or write error aborts
the running phase; there is no skip-and-continue and no retry.
"""

from __future__ import annotations

import logging
import math
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Protocol

from ucsync.core.errors import SyncError
from ucsync.core.exclusion import DEFAULT_POLICY, ExclusionPolicy
from ucsync.core.models import CatalogCollection, SchemaCollection, TableCollection

log = logging.getLogger(__name__)

Pacing = Callable[[int], float]
ProgressCallback = Callable[[int, int], None]

DEFAULT_PACING_SECONDS = 1.0


def fixed_pacing(seconds: float) -> Pacing:
    """Wait `seconds` before every request except the first."""
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError("Pacing interval must be a finite number >= 0.")

    def _pacing(index: int) -> float:
        return seconds if index > 0 else 0.0

    return _pacing


def no_pacing(index: int) -> float:
    return 0.0


class CatalogFetcher(Protocol):
    """Read side of the sync: one page per list call."""

    def list_catalogs(self) -> CatalogCollection:
        ...

    def list_schemas(
        self, catalog_name: str, max_results: int | None = None
    ) -> SchemaCollection:
        ...

    def list_tables(
        self, catalog_name: str, schema_name: str, max_results: int | None = None
    ) -> TableCollection:
        ...


class MirrorWriter(Protocol):
    """Write side of the sync."""

    def write_catalogs(self, catalogs) -> int:
        ...

    def write_schemas(self, schemas) -> int:
        ...

    def write_tables(self, tables) -> int:
        ...


@dataclass(frozen=True)
class SyncResult:
    """What a completed phase did. Failed phases raise instead."""

    phase: str
    catalogs: int = 0
    schemas: int = 0
    tables: int = 0
    rows_written: int = 0


@contextmanager
def _step(operation: str, **context: Any) -> Iterator[None]:
    """Log a failing step with its context, then let the error propagate."""
    try:
        yield
    except SyncError as exc:
        where = " ".join(f"{k}={v}" for k, v in context.items())
        log.error("%s failed %s: %s", operation, where, exc)
        raise


class MetastoreSync:
    """Walks catalogs -> schemas -> tables and mirrors each level."""

    def __init__(
        self,
        fetcher: CatalogFetcher,
        mirror: MirrorWriter,
        *,
        policy: ExclusionPolicy = DEFAULT_POLICY,
        pacing: Pacing | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.mirror = mirror
        self.policy = policy
        self.pacing = pacing or fixed_pacing(DEFAULT_PACING_SECONDS)
        self.sleep = sleep

    def _fetch_catalogs(self) -> CatalogCollection:
        with _step("list_catalogs"):
            return self.fetcher.list_catalogs()

    def _pace(self, index: int) -> None:
        delay = self.pacing(index)
        if delay > 0:
            log.debug("Pacing: waiting %.2fs before request %d", delay, index)
            self.sleep(delay)

    def sync_catalogs(self) -> SyncResult:
        """Fetch all catalogs and mirror the included ones."""
        log.info("Getting catalogs.")
        catalogs = self._fetch_catalogs()
        with _step("write_catalogs"):
            written = self.mirror.write_catalogs(catalogs)
        return SyncResult(
            phase="catalogs",
            catalogs=len(catalogs.catalogs),
            rows_written=written,
        )

    def sync_all_schemas(self) -> SyncResult:
        """Mirror the schemas of every included catalog, pacing between catalogs."""
        catalogs = self._fetch_catalogs()
        log.info("Getting schemas.")
        included = self.policy.filter_catalogs(catalogs.catalogs)
        schemas = 0
        written = 0

        for index, catalog in enumerate(included):
            self._pace(index)
            with _step("list_schemas", catalog=catalog.name):
                collection = self.fetcher.list_schemas(catalog.name)
            with _step("write_schemas", catalog=catalog.name):
                written += self.mirror.write_schemas(collection)
            schemas += len(collection.items())

        return SyncResult(
            phase="schemas",
            catalogs=len(included),
            schemas=schemas,
            rows_written=written,
        )

    def sync_all_tables(
        self, on_progress: ProgressCallback | None = None
    ) -> SyncResult:
        """Mirror the tables of every schema of every included catalog."""
        catalogs = self._fetch_catalogs()
        total = len(catalogs.catalogs)
        visited = 0
        schemas = 0
        tables = 0
        written = 0

        for processed, catalog in enumerate(catalogs.catalogs):
            log.info("Catalogs processed: %d of %d", processed, total)
            if self.policy.include_catalog(catalog):
                visited += 1
                with _step("list_schemas", catalog=catalog.name):
                    schema_collection = self.fetcher.list_schemas(catalog.name)

                for schema in schema_collection.items():
                    schemas += 1
                    log.info("Getting tables for schema %s.%s", catalog.name, schema.name)
                    with _step("list_tables", catalog=catalog.name, schema=schema.name):
                        table_collection = self.fetcher.list_tables(
                            catalog.name, schema.name
                        )
                    found = table_collection.items()
                    if not found:
                        continue
                    log.info("Num tables: %d", len(found))
                    tables += len(found)
                    with _step("write_tables", catalog=catalog.name, schema=schema.name):
                        written += self.mirror.write_tables(table_collection)

            if on_progress is not None:
                on_progress(processed + 1, total)

        return SyncResult(
            phase="tables",
            catalogs=visited,
            schemas=schemas,
            tables=tables,
            rows_written=written,
        )


@dataclass
class PhaseOutcome:
    """Outcome of one phase run by `run_phases`."""

    phase: str
    result: SyncResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_phases(
    sync: MetastoreSync,
    phases: list[str] | None = None,
    *,
    on_progress: ProgressCallback | None = None,
) -> list[PhaseOutcome]:
    """
    Run sync phases in order, each independently.

    A failing phase is logged and recorded; the following phases still run.
    """
    runners: dict[str, Callable[[], SyncResult]] = {
        "catalogs": sync.sync_catalogs,
        "schemas": sync.sync_all_schemas,
        "tables": lambda: sync.sync_all_tables(on_progress=on_progress),
    }
    selected = phases or list(runners)
    unknown = [p for p in selected if p not in runners]
    if unknown:
        raise ValueError(f"Unknown phase(s): {', '.join(unknown)}")

    outcomes: list[PhaseOutcome] = []
    for phase in selected:
        try:
            result = runners[phase]()
        except SyncError as exc:
            log.error("Sync phase '%s' failed: %s", phase, exc)
            outcomes.append(PhaseOutcome(phase=phase, error=exc))
            continue
        except Exception as exc:
            log.exception("Sync phase '%s' failed unexpectedly: %s", phase, exc)
            outcomes.append(PhaseOutcome(phase=phase, error=exc))
            continue
        log.info("Sync phase '%s' finished: %s row(s) written", phase, result.rows_written)
        outcomes.append(PhaseOutcome(phase=phase, result=result))
    return outcomes
