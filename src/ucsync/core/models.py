"""Core domain models for Unity Catalog.

Two layers live here:

- Wire models (pydantic) describe what the REST API returns. They are a
  superset of what gets stored: nested fields are declared so that dropping
  them is an explicit, visible decision.
- Records (frozen dataclasses) are the flat rows mirrored into SQLite. Their
  field order is the column order used by the mirror's insert statements.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class CatalogInfo(_WireModel):
    """Catalog as returned by `GET /unity-catalog/catalogs`."""

    name: str
    owner: str
    comment: str | None = None
    storage_root: str | None = None
    provider_name: str | None = None
    share_name: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    catalog_type: str
    storage_location: str | None = None
    isolation_mode: str | None = None
    connection_name: str | None = None
    full_name: str
    securable_kind: str | None = None
    securable_type: str | None = None
    browse_only: bool | None = None

    # nested, not mirrored
    properties: dict[str, Any] | None = None
    options: dict[str, Any] | None = None
    provisioning_info: dict[str, Any] | None = None
    effective_predictive_optimization_flag: dict[str, Any] | None = None


class SchemaInfo(_WireModel):
    """Schema as returned by `GET /unity-catalog/schemas`."""

    name: str
    catalog_name: str
    owner: str
    comment: str | None = None
    storage_root: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    full_name: str
    storage_location: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    catalog_type: str | None = None
    browse_only: bool | None = None
    schema_id: str

    # nested, not mirrored
    properties: dict[str, Any] | None = None
    effective_predictive_optimization_flag: dict[str, Any] | None = None


class TableInfo(_WireModel):
    """Table as returned by `GET /unity-catalog/tables`."""

    name: str
    catalog_name: str
    schema_name: str
    table_type: str
    data_source_format: str | None = None
    storage_location: str | None = None
    view_definition: str | None = None
    sql_path: str | None = None
    owner: str
    comment: str | None = None
    storage_credential_name: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    full_name: str
    data_access_configuration_id: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    deleted_at: int | None = None
    table_id: str
    access_point: str | None = None
    pipeline_id: str | None = None
    browse_only: bool | None = None

    # nested, not mirrored
    columns: list[dict[str, Any]] | None = None
    dependencies: dict[str, Any] | None = None
    properties: dict[str, Any] | None = None
    table_constraints: list[dict[str, Any]] | None = None
    row_filter: dict[str, Any] | None = None
    delta_runtime_properties_kvpairs: dict[str, Any] | None = None
    effective_predictive_optimization_flag: dict[str, Any] | None = None


class CatalogCollection(_WireModel):
    """Envelope of the catalogs list endpoint."""

    catalogs: list[CatalogInfo]
    next_page_token: str | None = None

    def items(self) -> list[CatalogInfo]:
        return list(self.catalogs)


class SchemaCollection(_WireModel):
    """Envelope of the schemas list endpoint (`schemas` may be null)."""

    schemas: list[SchemaInfo] | None = None
    next_page_token: str | None = None

    def items(self) -> list[SchemaInfo]:
        return list(self.schemas or [])


class TableCollection(_WireModel):
    """Envelope of the tables list endpoint (`tables` may be null)."""

    tables: list[TableInfo] | None = None
    next_page_token: str | None = None

    def items(self) -> list[TableInfo]:
        return list(self.tables or [])


class Record:
    """Mixin giving records their column list and bind values."""

    TABLE: ClassVar[str]
    KEY: ClassVar[tuple[str, ...]]

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))  # type: ignore[arg-type]

    def values(self) -> tuple[Any, ...]:
        return astuple(self)  # type: ignore[call-overload]

    @property
    def key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, k) for k in self.KEY)

    @classmethod
    def from_info(cls, info: BaseModel):
        """Project a wire model down to the persisted columns."""
        data = info.model_dump()
        return cls(**{name: data.get(name) for name in cls.columns()})


@dataclass(frozen=True)
class UCCatalog(Record):
    """Lightweight representation of a Unity Catalog catalog."""

    TABLE: ClassVar[str] = "catalogs"
    KEY: ClassVar[tuple[str, ...]] = ("name",)

    name: str
    owner: str
    comment: str | None = None
    storage_root: str | None = None
    provider_name: str | None = None
    share_name: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    catalog_type: str | None = None
    storage_location: str | None = None
    isolation_mode: str | None = None
    connection_name: str | None = None
    full_name: str | None = None
    securable_kind: str | None = None
    securable_type: str | None = None
    browse_only: bool | None = None


@dataclass(frozen=True)
class UCSchema(Record):
    """Lightweight representation of a Unity Catalog schema."""

    TABLE: ClassVar[str] = "schemas"
    KEY: ClassVar[tuple[str, ...]] = ("catalog_name", "name")

    name: str
    catalog_name: str
    owner: str
    comment: str | None = None
    storage_root: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    full_name: str | None = None
    storage_location: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    catalog_type: str | None = None
    browse_only: bool | None = None
    schema_id: str | None = None


@dataclass(frozen=True)
class UCTable(Record):
    """Lightweight representation of a Unity Catalog table."""

    TABLE: ClassVar[str] = "tables"
    KEY: ClassVar[tuple[str, ...]] = ("catalog_name", "schema_name", "name")

    name: str
    catalog_name: str
    schema_name: str
    table_type: str
    data_source_format: str | None = None
    storage_location: str | None = None
    view_definition: str | None = None
    sql_path: str | None = None
    owner: str | None = None
    comment: str | None = None
    storage_credential_name: str | None = None
    enable_predictive_optimization: str | None = None
    metastore_id: str | None = None
    full_name: str | None = None
    data_access_configuration_id: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    updated_at: int | None = None
    updated_by: str | None = None
    deleted_at: int | None = None
    table_id: str | None = None
    access_point: str | None = None
    pipeline_id: str | None = None
    browse_only: bool | None = None
