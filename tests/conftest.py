"""Shared pytest fixtures for the storefront MCP test suite."""
from __future__ import annotations

import pytest


class FakeClock:
    """Manually advanced monotonic clock for deterministic expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_catalog_payload() -> dict:  # type: ignore[type-arg]
    """Sample response of GET /catalog/productos."""
    return {
        "items": [
            {
                "id": 17,
                "titulo": "Taladro percutor 750W",
                "slug": "taladro-percutor-750w",
                "precio": 45990,
                "marca": {"id": 3, "slug": "marca", "nombre": "Marca"},
                "categoria": {"id": 5, "slug": "herramientas", "nombre": "Herramientas"},
            },
            {
                "id": 18,
                "titulo": "Amoladora angular 115mm",
                "slug": "amoladora-angular-115mm",
                "precio": 38990,
                "marca": {"id": 3, "slug": "marca", "nombre": "Marca"},
                "categoria": {"id": 5, "slug": "herramientas", "nombre": "Herramientas"},
            },
        ],
        "meta": {"total": 26, "page": 1, "perPage": 24, "pages": 2},
    }


@pytest.fixture
def sample_admin_payload() -> dict:  # type: ignore[type-arg]
    """Sample response of GET /admin/tables/{resource}/records."""
    return {
        "data": [
            {"id": 1, "nombre": "ADMIN"},
            {"id": 2, "nombre": "CLIENTE"},
        ],
        "meta": {"total": 2, "page": 1, "limit": 10, "totalPages": 1},
    }
