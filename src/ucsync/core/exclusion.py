"""Which catalogs take part in the mirror.

A catalog that is excluded here is never written, and its schemas and tables
are never fetched. The rule is fail-open: catalog types we do
not know about are mirrored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, TypeVar

DELTASHARING_CATALOG = "DELTASHARING_CATALOG"

RESERVED_CATALOG_NAMES: frozenset[str] = frozenset(
    {
        "__databricks_internal",
        "adrian_hive_test",
    }
)


class CatalogLike(Protocol):
    """Anything with a catalog name and type (wire model or stored record)."""

    name: str
    catalog_type: str | None


C = TypeVar("C", bound=CatalogLike)


@dataclass(frozen=True)
class ExclusionPolicy:
    """Pure predicate deciding whether a catalog is mirrored."""

    excluded_types: frozenset[str] = frozenset({DELTASHARING_CATALOG})
    reserved_names: frozenset[str] = RESERVED_CATALOG_NAMES

    @classmethod
    def with_extra_names(cls, names: Iterable[str]) -> "ExclusionPolicy":
        """Return the default policy plus additional reserved catalog names."""
        extra = {n.strip() for n in names if n and n.strip()}
        return cls(reserved_names=RESERVED_CATALOG_NAMES | frozenset(extra))

    def include_catalog(self, catalog: CatalogLike) -> bool:
        if getattr(catalog, "catalog_type", None) in self.excluded_types:
            return False
        return getattr(catalog, "name", None) not in self.reserved_names

    def filter_catalogs(self, catalogs: Iterable[C]) -> list[C]:
        """Keep catalogs passing `include_catalog`, preserving order."""
        return [c for c in catalogs if self.include_catalog(c)]


DEFAULT_POLICY = ExclusionPolicy()
