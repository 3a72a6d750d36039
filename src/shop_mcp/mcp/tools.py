from __future__ import annotations

import dataclasses
import json
import logging
import re
from typing import Any

import httpx
from mcp import types
from mcp.server.fastmcp import FastMCP

from shop_mcp.application.admin_service import AdminService
from shop_mcp.application.catalog_service import CatalogService
from shop_mcp.domain.exceptions import ApiError, ValidationError
from shop_mcp.domain.keys import AdminQuery, CatalogQuery
from shop_mcp.domain.value_objects import CatalogSort, SortDirection
from shop_mcp.infrastructure.cache import TTLCache

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

_RESULT_URI = "mcp://shop-mcp/result"


def _as_resource(json_str: str) -> list[types.EmbeddedResource]:
    """Wrap a JSON string as an embedded resource so the LLM does not narrate it."""
    return [
        types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=_RESULT_URI,  # type: ignore[arg-type]
                mimeType="application/json",
                text=json_str,
            ),
        )
    ]


def _dump(payload: Any) -> list[types.EmbeddedResource]:
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        payload = dataclasses.asdict(payload)
    return _as_resource(json.dumps(payload, default=str, ensure_ascii=False))


def _error_json(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


def _handle_exception(exc: Exception) -> list[types.EmbeddedResource]:
    if isinstance(exc, ValidationError):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, ApiError):
        if exc.status_code == 400:
            return _as_resource(_error_json("Invalid request. Please check your inputs."))
        if exc.status_code in (401, 403):
            return _as_resource(_error_json("Not authorized for this resource."))
        if exc.status_code == 404:
            return _as_resource(_error_json("Resource not found."))
        if exc.status_code >= 500:
            return _as_resource(
                _error_json(f"Upstream API error ({exc.status_code}). Please try again later.")
            )
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, httpx.TimeoutException):
        return _as_resource(_error_json("Request timed out. Please try again."))
    if isinstance(exc, re.error):
        return _as_resource(_error_json(f"Invalid pattern: {exc}"))
    if isinstance(exc, ValueError):
        return _as_resource(_error_json(str(exc)))
    logger.exception("Unexpected error in MCP tool: %s", exc)
    return _as_resource(_error_json("An unexpected error occurred."))


def _validate_paging(page: int, size: int) -> None:
    if page < 1:
        raise ValueError("page must be 1 or greater")
    if not 1 <= size <= MAX_PAGE_SIZE:
        raise ValueError(f"page size must be between 1 and {MAX_PAGE_SIZE}")


def _validate_sort(sort: str | None) -> CatalogSort | None:
    if sort is None or not sort.strip():
        return None
    lower = sort.strip().lower()
    valid_values = {s.value for s in CatalogSort}
    if lower not in valid_values:
        raise ValueError(f"Unknown sort: {sort}")
    return CatalogSort(lower)


def _validate_sort_dir(sort_dir: str | None) -> SortDirection | None:
    if sort_dir is None or not sort_dir.strip():
        return None
    lower = sort_dir.strip().lower()
    if lower not in {d.value for d in SortDirection}:
        raise ValueError(f"Unknown sort direction: {sort_dir}")
    return SortDirection(lower)


def register_tools(
    mcp: FastMCP,
    catalog_svc: CatalogService,
    admin_svc: AdminService,
    cache: TTLCache,
) -> None:
    """Bind all @mcp.tool decorators. Called once during server setup."""

    @mcp.tool()
    async def list_products(
        page: int = 1,
        per_page: int = 12,
        q: str | None = None,
        marca: str | None = None,
        categoria: str | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
        sort: str | None = None,
    ) -> list[types.EmbeddedResource]:
        """List published catalog products. Results are cached for five minutes.

        Args:
            page: 1-based page number.
            per_page: Products per page (1-100, default 12).
            q: Optional title search text.
            marca: Optional brand slug or numeric id.
            categoria: Optional category slug or numeric id.
            min_price: Optional lower price bound.
            max_price: Optional upper price bound.
            sort: One of relevancia, novedades, precio_asc, precio_desc, rating_desc.
        """
        try:
            _validate_paging(page, per_page)
            query = CatalogQuery(
                page=page,
                per_page=per_page,
                q=q,
                marca=marca,
                categoria=categoria,
                min_price=min_price,
                max_price=max_price,
                sort=_validate_sort(sort),
            )
            return _dump(await catalog_svc.list_products(query))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def list_admin_records(
        resource: str,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        filters: dict[str, Any] | None = None,
        sort_by: str | None = None,
        sort_dir: str | None = None,
    ) -> list[types.EmbeddedResource]:
        """List records of an admin resource (table). Results are cached for two minutes.

        Args:
            resource: Resource (table) name, e.g. "Producto".
            page: 1-based page number.
            limit: Records per page (1-100, default 10).
            search: Optional free-text search.
            filters: Optional field -> value filter object.
            sort_by: Optional field to sort by.
            sort_dir: "asc" or "desc".
        """
        try:
            _validate_paging(page, limit)
            query = AdminQuery(
                resource=resource.strip(),
                page=page,
                limit=limit,
                search=search,
                filters=filters,
                sort_by=sort_by,
                sort_dir=_validate_sort_dir(sort_dir),
            )
            return _dump(await admin_svc.find_all(query))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_admin_record(resource: str, record_id: str) -> list[types.EmbeddedResource]:
        """Get one record of an admin resource by id (never cached)."""
        try:
            if not record_id.strip():
                return _as_resource(_error_json("record_id cannot be empty"))
            return _dump(await admin_svc.find_one(resource, record_id.strip()))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def create_admin_record(
        resource: str, data: dict[str, Any]
    ) -> list[types.EmbeddedResource]:
        """Create a record and invalidate the resource's cached listings."""
        try:
            return _dump(await admin_svc.create(resource, data))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def update_admin_record(
        resource: str, record_id: str, data: dict[str, Any]
    ) -> list[types.EmbeddedResource]:
        """Update a record and invalidate the resource's cached listings."""
        try:
            if not record_id.strip():
                return _as_resource(_error_json("record_id cannot be empty"))
            return _dump(await admin_svc.update(resource, record_id.strip(), data))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def delete_admin_record(resource: str, record_id: str) -> list[types.EmbeddedResource]:
        """Delete a record and invalidate the resource's cached listings."""
        try:
            if not record_id.strip():
                return _as_resource(_error_json("record_id cannot be empty"))
            return _dump(await admin_svc.remove(resource, record_id.strip()))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def cache_stats() -> list[types.EmbeddedResource]:
        """Report the number of cached entries and their keys."""
        return _dump(cache.get_stats())

    @mcp.tool()
    async def invalidate_cache(pattern: str) -> list[types.EmbeddedResource]:
        """Delete every cached entry whose key matches a regular expression.

        Args:
            pattern: Regular expression searched in each key, e.g. "^admin:Producto:".
        """
        try:
            if not pattern:
                return _as_resource(_error_json("pattern cannot be empty"))
            return _dump({"deleted": cache.delete_pattern(pattern)})
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def clear_cache() -> list[types.EmbeddedResource]:
        """Drop every cached entry."""
        removed = len(cache)
        cache.clear()
        return _dump({"deleted": removed})
