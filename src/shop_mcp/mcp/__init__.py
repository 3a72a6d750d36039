from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp.server.fastmcp import FastMCP

from shop_mcp.application.admin_service import AdminService
from shop_mcp.application.catalog_service import CatalogService
from shop_mcp.infrastructure.cache import TTLCache
from shop_mcp.infrastructure.settings import Settings, load_settings
from shop_mcp.infrastructure.storefront_client import StorefrontClient
from shop_mcp.mcp.resources import register_resources
from shop_mcp.mcp.tools import register_tools


@dataclass
class Runtime:
    """Process-wide objects shared by every tool invocation."""

    settings: Settings
    cache: TTLCache
    client: StorefrontClient
    catalog: CatalogService
    admin: AdminService

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator[None]:
        """Run the cache sweep for the duration of the block, then release resources."""
        self.cache.start()
        try:
            yield
        finally:
            await self.cache.stop()
            await self.client.close()


def build_runtime(settings: Settings | None = None) -> Runtime:
    """Construct the cache, upstream client and services from settings."""
    settings = settings if settings is not None else load_settings()
    cache = TTLCache(default_ttl=settings.cache_ttl)
    http_client = httpx.AsyncClient(timeout=settings.timeout, follow_redirects=True)
    client = StorefrontClient(settings.api_url, http_client, token=settings.api_token)
    return Runtime(
        settings=settings,
        cache=cache,
        client=client,
        catalog=CatalogService(client, cache),
        admin=AdminService(client, cache),
    )


def create_mcp_app(runtime: Runtime | None = None) -> FastMCP:
    """Create and configure the FastMCP application with all services wired.

    The sweep lifecycle is not tied to FastMCP sessions; the caller enters
    ``runtime.lifespan()`` once around the server.
    """
    runtime = runtime if runtime is not None else build_runtime()
    mcp = FastMCP("Storefront MCP", stateless_http=True)
    register_tools(mcp, runtime.catalog, runtime.admin, runtime.cache)
    register_resources(mcp, runtime.cache)
    return mcp
