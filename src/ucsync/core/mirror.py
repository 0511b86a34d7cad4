"""Idempotent persistence of Unity Catalog records into SQLite.

Every write is an `INSERT OR REPLACE` keyed on the record's natural key, so
re-running a sync overwrites rows instead of duplicating them ("last fetch
wins"). Rows are never deleted here.

By default each row is its own statement and commit: if row k fails, rows
1..k-1 stay committed and nothing after k is attempted. With `atomic=True`
a whole collection is written in one transaction and rolled back on any
failure.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, TypeVar, Union

from pydantic import BaseModel

from ucsync.core.errors import PersistenceError
from ucsync.core.exclusion import DEFAULT_POLICY, ExclusionPolicy
from ucsync.core.models import (
    CatalogCollection,
    CatalogInfo,
    Record,
    SchemaCollection,
    SchemaInfo,
    TableCollection,
    TableInfo,
    UCCatalog,
    UCSchema,
    UCTable,
)

log = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

Catalogs = Union[CatalogCollection, Iterable[Union[CatalogInfo, UCCatalog]]]
Schemas = Union[SchemaCollection, Iterable[Union[SchemaInfo, UCSchema]]]
Tables = Union[TableCollection, Iterable[Union[TableInfo, UCTable]]]

MIRRORED_TABLES = (UCCatalog.TABLE, UCSchema.TABLE, UCTable.TABLE)


def _upsert_sql(record_type: type[Record]) -> str:
    columns = record_type.columns()
    placeholders = ", ".join("?" for _ in columns)
    return (
        f"INSERT OR REPLACE INTO {record_type.TABLE} ({', '.join(columns)}) "
        f"VALUES ({placeholders})"
    )


def _as_records(items, record_type: type[R]) -> list[R]:
    """Accept an envelope, wire models or records and return records."""
    if isinstance(items, (CatalogCollection, SchemaCollection, TableCollection)):
        items = items.items()
    out: list[R] = []
    for item in items:
        if isinstance(item, record_type):
            out.append(item)
        elif isinstance(item, BaseModel):
            out.append(record_type.from_info(item))
        else:
            raise TypeError(
                f"Cannot persist {type(item).__name__} as {record_type.__name__}"
            )
    return out


class Mirror:
    """Writes catalogs, schemas and tables into the local mirror database."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        policy: ExclusionPolicy = DEFAULT_POLICY,
        atomic: bool = False,
    ) -> None:
        self.conn = conn
        self.policy = policy
        self.atomic = atomic

    def _write(self, records: list[Record], record_type: type[Record]) -> int:
        if not records:
            return 0
        sql = _upsert_sql(record_type)
        written = 0
        key = ""
        try:
            for record in records:
                key = ".".join(map(str, record.key))
                log.debug("Writing %s %s", record_type.TABLE, key)
                self.conn.execute(sql, record.values())
                if not self.atomic:
                    self.conn.commit()
                written += 1
            if self.atomic:
                self.conn.commit()
        except sqlite3.Error as exc:
            log.error("Error writing %s row %s: %s", record_type.TABLE, key, exc)
            self.conn.rollback()
            raise PersistenceError(
                str(exc),
                context={"table": record_type.TABLE, "key": key, "written": written},
            ) from exc
        log.info("Wrote %d row(s) to %s", written, record_type.TABLE)
        return written

    def write_catalogs(self, catalogs: Catalogs) -> int:
        """Upsert catalogs that pass the exclusion policy. Returns rows written."""
        records = _as_records(catalogs, UCCatalog)
        kept = self.policy.filter_catalogs(records)
        skipped = len(records) - len(kept)
        if skipped:
            log.info("Skipping %d excluded catalog(s)", skipped)
        return self._write(kept, UCCatalog)

    def write_schemas(self, schemas: Schemas) -> int:
        """Upsert schemas. Returns rows written."""
        return self._write(_as_records(schemas, UCSchema), UCSchema)

    def write_tables(self, tables: Tables) -> int:
        """Upsert tables. Returns rows written."""
        return self._write(_as_records(tables, UCTable), UCTable)

    def search_catalogs(self, term: str | None = None) -> list[str]:
        """Return mirrored catalog names, optionally containing `term`."""
        sql = "SELECT name FROM catalogs"
        params: tuple[str, ...] = ()
        if term:
            sql += " WHERE instr(name, ?) > 0"
            params = (term,)
        sql += " ORDER BY name"
        try:
            return [row[0] for row in self.conn.execute(sql, params)]
        except sqlite3.Error as exc:
            log.error("Error searching catalogs: %s", exc)
            raise PersistenceError(str(exc), context={"operation": "search_catalogs"}) from exc

    def count(self, table: str) -> int:
        """Return the number of rows in one of the mirrored tables."""
        if table not in MIRRORED_TABLES:
            raise ValueError(f"Unknown table: {table}")
        try:
            return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        except sqlite3.Error as exc:
            raise PersistenceError(str(exc), context={"table": table}) from exc
