"""Cache key construction for catalog and admin listing queries.

A key is a namespace tag followed by the query dimensions in a fixed order,
joined with ``:``. Every dimension is percent-encoded, so a ``:`` inside a
search term cannot shift the segments of one query onto another.

Absent dimensions (``None``) and empty strings both become an empty segment.
This is intentional: "no search" and ``search=""`` hit the same cache entry.
"""
from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

from shop_mcp.domain.value_objects import CatalogSort, SortDirection

KEY_SEPARATOR = ":"
ADMIN_NAMESPACE = "admin"
CATALOG_NAMESPACE = "catalog:products"


def _segment(value: Any) -> str:
    """Normalize one query dimension into its canonical key segment."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, Mapping):
        if not value:
            return ""
        value = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return quote(str(value), safe="")


def _join(namespace: str, *dimensions: Any) -> str:
    return KEY_SEPARATOR.join([namespace, *(_segment(d) for d in dimensions)])


def generate_admin_key(
    resource: str,
    page: int,
    limit: int,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
    sort_by: str | None = None,
    sort_dir: SortDirection | str | None = None,
) -> str:
    """Build the cache key for one admin resource listing.

    Example:
        >>> generate_admin_key("Role", 1, 10)
        'admin:Role:1:10::::'
    """
    return _join(ADMIN_NAMESPACE, resource, page, limit, search, filters, sort_by, sort_dir)


def generate_catalog_key(
    page: int,
    per_page: int,
    q: str | None = None,
    marca: str | None = None,
    categoria: str | None = None,
    min_price: int | None = None,
    max_price: int | None = None,
    sort: CatalogSort | str | None = None,
) -> str:
    """Build the cache key for one catalog product listing.

    Example:
        >>> generate_catalog_key(1, 24, None, "Marca", sort="precio_asc")
        'catalog:products:1:24::Marca::::precio_asc'
    """
    return _join(CATALOG_NAMESPACE, page, per_page, q, marca, categoria, min_price, max_price, sort)


def admin_resource_pattern(resource: str) -> str:
    """Regex matching every cached admin listing of ``resource``.

    The resource segment is encoded and escaped here so that the pattern
    handed to ``TTLCache.delete_pattern`` never over-matches a sibling
    resource such as ``Role`` vs ``RoleGroup``.
    """
    prefix = KEY_SEPARATOR.join([ADMIN_NAMESPACE, _segment(resource)]) + KEY_SEPARATOR
    return "^" + re.escape(prefix)


@dataclass(frozen=True)
class AdminQuery:
    """Parameters of an admin resource listing."""

    resource: str
    page: int = 1
    limit: int = 10
    search: str | None = None
    filters: Mapping[str, Any] | None = None
    sort_by: str | None = None
    sort_dir: SortDirection | None = None

    def cache_key(self) -> str:
        return generate_admin_key(
            self.resource,
            self.page,
            self.limit,
            self.search,
            self.filters,
            self.sort_by,
            self.sort_dir,
        )


@dataclass(frozen=True)
class CatalogQuery:
    """Parameters of a public catalog product listing."""

    page: int = 1
    per_page: int = 12
    q: str | None = None
    marca: str | None = None  # slug or numeric id
    categoria: str | None = None  # slug or numeric id
    min_price: int | None = None
    max_price: int | None = None
    sort: CatalogSort | None = None

    def cache_key(self) -> str:
        return generate_catalog_key(
            self.page,
            self.per_page,
            self.q,
            self.marca,
            self.categoria,
            self.min_price,
            self.max_price,
            self.sort,
        )
