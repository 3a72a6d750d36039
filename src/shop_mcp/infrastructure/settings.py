from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from shop_mcp.domain.exceptions import ConfigurationError

DEFAULT_CACHE_TTL_MS = 300_000  # 5 minutes
DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 15.0  # seconds


@dataclass(frozen=True)
class Settings:
    """Process configuration read from environment variables."""

    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS
    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    host: str = "0.0.0.0"
    port: int = 3002
    log_level: str = "INFO"

    @property
    def cache_ttl(self) -> float:
        """Default cache TTL in seconds."""
        return self.cache_ttl_ms / 1000


def _number(env: Mapping[str, str], name: str, default: float, cast: type) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``env`` (defaults to ``os.environ``)."""
    env = os.environ if env is None else env

    cache_ttl_ms = int(_number(env, "CACHE_TTL", DEFAULT_CACHE_TTL_MS, int))
    if cache_ttl_ms <= 0:
        raise ConfigurationError("CACHE_TTL must be a positive number of milliseconds")
    timeout = float(_number(env, "STOREFRONT_TIMEOUT", DEFAULT_TIMEOUT, float))
    if timeout <= 0:
        raise ConfigurationError("STOREFRONT_TIMEOUT must be positive")

    return Settings(
        cache_ttl_ms=cache_ttl_ms,
        api_url=env.get("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
        api_token=env.get("STOREFRONT_API_TOKEN") or None,
        timeout=timeout,
        host=env.get("HOST", "0.0.0.0"),
        port=int(_number(env, "PORT", 3002, int)),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
