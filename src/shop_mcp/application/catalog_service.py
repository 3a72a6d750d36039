from __future__ import annotations

import logging
import math
from typing import Any

from shop_mcp.domain.entities import Page
from shop_mcp.domain.keys import CatalogQuery
from shop_mcp.infrastructure.cache import TTLCache
from shop_mcp.infrastructure.storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

TTL_CATALOG = 300  # seconds; public listings tolerate five minutes of staleness


def page_from_payload(
    payload: dict[str, Any],
    items_field: str,
    per_page_field: str,
    default_page: int,
    default_per_page: int,
) -> Page:
    """Map an upstream ``{<items>, meta: {...}}`` payload onto a Page."""
    meta: dict[str, Any] = payload.get("meta", {})
    items: list[dict[str, Any]] = payload.get(items_field, [])
    total = int(meta.get("total", len(items)))
    per_page = int(meta.get(per_page_field) or default_per_page)
    pages = meta.get("pages", meta.get("totalPages"))
    if pages is None:
        pages = math.ceil(total / per_page) if per_page else 0
    return Page(
        items=items,
        total=total,
        page=int(meta.get("page") or default_page),
        per_page=per_page,
        pages=int(pages),
    )


class CatalogService:
    """Cached read path for the public product catalog."""

    def __init__(self, client: StorefrontClient, cache: TTLCache) -> None:
        self._client = client
        self._cache = cache

    async def list_products(self, query: CatalogQuery) -> Page:
        key = query.cache_key()
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Catalog cache hit: %s", key)
            return cached  # type: ignore[no-any-return]

        logger.debug("Catalog cache miss: %s", key)
        payload = await self._client.list_products(query)
        page = page_from_payload(payload, "items", "perPage", query.page, query.per_page)
        self._cache.set(key, page, ttl=TTL_CATALOG)
        return page
