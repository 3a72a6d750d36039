from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from shop_mcp.infrastructure.cache import TTLCache


def register_resources(mcp: FastMCP, cache: TTLCache) -> None:
    """Register read-only configuration resources. Called once during server setup."""

    @mcp.resource("config://shop-mcp/cache", mime_type="application/json")
    def cache_config() -> str:
        """Cache configuration and sweep state."""
        return json.dumps(
            {
                "default_ttl_seconds": cache.default_ttl,
                "sweep_interval_seconds": cache.sweep_interval,
                "sweep_running": cache.running,
                "size": len(cache),
            }
        )
