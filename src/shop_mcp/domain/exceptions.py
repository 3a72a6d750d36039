from __future__ import annotations


class ShopMcpError(Exception):
    """Base exception for all storefront MCP errors."""


class ApiError(ShopMcpError):
    """Raised when the upstream storefront API returns an unexpected HTTP error status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Upstream API error ({status_code})")


class ValidationError(ShopMcpError):
    """Raised when input parameters fail validation before any network call."""


class ConfigurationError(ShopMcpError):
    """Raised when an environment variable holds an unusable value."""
