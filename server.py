#!/usr/bin/env python3
"""Storefront MCP Server, repository root entry point.

Usage:
    uv run server.py           # HTTP mode (default)
    uv run server.py --stdio   # stdio mode for Claude Desktop
"""
from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from starlette.middleware.cors import CORSMiddleware

from shop_mcp.infrastructure.settings import load_settings
from shop_mcp.mcp import build_runtime, create_mcp_app

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


async def _run_stdio() -> None:
    runtime = build_runtime(settings)
    mcp = create_mcp_app(runtime)
    async with runtime.lifespan():
        await mcp.run_stdio_async()


if __name__ == "__main__":
    if "--stdio" in sys.argv:
        # Claude Desktop mode
        asyncio.run(_run_stdio())
    else:
        runtime = build_runtime(settings)
        mcp = create_mcp_app(runtime)
        app = mcp.streamable_http_app()
        session_lifespan = app.router.lifespan_context

        @asynccontextmanager
        async def lifespan(starlette_app):  # type: ignore[no-untyped-def]
            # Cache sweep spans the whole server, not individual MCP sessions
            async with runtime.lifespan(), session_lifespan(starlette_app):
                yield

        app.router.lifespan_context = lifespan
        # HTTP mode with CORS
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        print(f"Storefront MCP Server listening on http://{settings.host}:{settings.port}/mcp")
        uvicorn.run(app, host=settings.host, port=settings.port)
