from __future__ import annotations

import dataclasses
import logging
import re
from typing import Any

from shop_mcp.application.catalog_service import page_from_payload
from shop_mcp.domain.entities import Page
from shop_mcp.domain.exceptions import ValidationError
from shop_mcp.domain.keys import AdminQuery, admin_resource_pattern
from shop_mcp.infrastructure.cache import TTLCache
from shop_mcp.infrastructure.storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

TTL_ADMIN = 120  # seconds; admin data goes stale faster than the catalog

_RESOURCE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def validate_resource(resource: str) -> str:
    """Return ``resource`` stripped, or raise ValidationError for an unusable table name."""
    name = resource.strip()
    if not _RESOURCE_RE.match(name):
        raise ValidationError(f"Invalid resource name: {resource!r}")
    return name


class AdminService:
    """Admin CRUD over the storefront API.

    Listings are memoized per query; every successful mutation drops all
    cached listings of the affected resource.
    """

    def __init__(self, client: StorefrontClient, cache: TTLCache) -> None:
        self._client = client
        self._cache = cache

    async def find_all(self, query: AdminQuery) -> Page:
        query = dataclasses.replace(query, resource=validate_resource(query.resource))
        key = query.cache_key()
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Admin cache hit: %s", key)
            return cached  # type: ignore[no-any-return]

        logger.debug("Admin cache miss: %s", key)
        payload = await self._client.list_records(query)
        page = page_from_payload(payload, "data", "limit", query.page, query.limit)
        self._cache.set(key, page, ttl=TTL_ADMIN)
        return page

    async def find_one(self, resource: str, record_id: str) -> dict[str, Any]:
        """Single records are always read through; they are not cached."""
        return await self._client.get_record(validate_resource(resource), record_id)

    async def create(self, resource: str, data: dict[str, Any]) -> dict[str, Any]:
        name = validate_resource(resource)
        result = await self._client.create_record(name, data)
        self.invalidate(name)
        return result

    async def update(self, resource: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        name = validate_resource(resource)
        result = await self._client.update_record(name, record_id, data)
        self.invalidate(name)
        return result

    async def remove(self, resource: str, record_id: str) -> dict[str, Any]:
        name = validate_resource(resource)
        result = await self._client.delete_record(name, record_id)
        self.invalidate(name)
        return result

    def invalidate(self, resource: str) -> int:
        """Drop every cached listing page of ``resource``. Returns the count removed."""
        removed = self._cache.delete_pattern(admin_resource_pattern(resource))
        logger.debug("Invalidated %d cached pages for %s", removed, resource)
        return removed
