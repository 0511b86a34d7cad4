from __future__ import annotations

import json
import logging
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ValidationError

from ucsync.core.adapters.transport import Transport
from ucsync.core.errors import DecodeError
from ucsync.core.models import (
    CatalogCollection,
    SchemaCollection,
    TableCollection,
    TableInfo,
    UCTable,
)

log = logging.getLogger(__name__)

API_BASE = "https://{host}/api/2.1/unity-catalog"

M = TypeVar("M", bound=BaseModel)


def _require(value: str, what: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{what} must be a non-empty string.")
    return value


def _check_max_results(max_results: int | None) -> None:
    if max_results is not None and max_results < 1:
        raise ValueError("max_results must be a positive integer.")


class UnityCatalogAdapter:
    """Fetches one page of each Unity Catalog list endpoint (catalogs/schemas/tables).

    Only the first page is requested. When the service reports more results
    (`next_page_token`), the truncation is logged and the token is not followed.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{API_BASE.format(host=self.transport.host)}/{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    def _decode(self, body: str, model: type[M], url: str) -> M:
        try:
            payload = json.loads(body)
        except ValueError as exc:
            log.error("Error deserializing JSON response from %s: %s", url, exc)
            raise DecodeError(f"Response is not valid JSON: {exc}", context={"url": url}) from exc
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            log.error("Error deserializing JSON response from %s: %s", url, exc)
            raise DecodeError(
                f"Response does not match {model.__name__}: {exc.error_count()} error(s)",
                context={"url": url},
            ) from exc

    def _get(self, url: str, model: type[M]) -> M:
        body = self.transport.fetch(url)
        result = self._decode(body, model, url)
        token = getattr(result, "next_page_token", None)
        if token:
            log.warning("Result truncated, only the first page was fetched: %s", url)
        return result

    def list_catalogs(self) -> CatalogCollection:
        """List all catalogs visible to the current principal."""
        return self._get(self._url("catalogs"), CatalogCollection)

    def list_schemas(
        self, catalog_name: str, max_results: int | None = None
    ) -> SchemaCollection:
        """List schemas in a given catalog."""
        _require(catalog_name, "catalog_name")
        _check_max_results(max_results)
        url = self._url(
            "schemas", {"catalog_name": catalog_name, "max_results": max_results}
        )
        return self._get(url, SchemaCollection)

    def list_tables(
        self,
        catalog_name: str,
        schema_name: str,
        max_results: int | None = None,
    ) -> TableCollection:
        """List tables in a given catalog.schema."""
        _require(catalog_name, "catalog_name")
        _require(schema_name, "schema_name")
        _check_max_results(max_results)
        url = self._url(
            "tables",
            {
                "catalog_name": catalog_name,
                "schema_name": schema_name,
                "max_results": max_results,
            },
        )
        return self._get(url, TableCollection)

    def get_table(self, full_name: str) -> UCTable:
        """Fetch a single table by `catalog.schema.table`."""
        _require(full_name, "full_name")
        url = self._url(f"tables/{quote(full_name, safe='.')}")
        return UCTable.from_info(self._get(url, TableInfo))
