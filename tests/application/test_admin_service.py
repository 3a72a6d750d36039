"""Tests for AdminService caching and invalidation."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from shop_mcp.application.admin_service import AdminService, validate_resource
from shop_mcp.domain.exceptions import ApiError, ValidationError
from shop_mcp.domain.keys import AdminQuery, generate_catalog_key
from shop_mcp.infrastructure.cache import TTLCache


def make_mock_client(payload: dict) -> MagicMock:  # type: ignore[type-arg]
    client = MagicMock()
    client.list_records = AsyncMock(return_value=payload)
    client.get_record = AsyncMock(return_value={"id": 1, "nombre": "ADMIN"})
    client.create_record = AsyncMock(return_value={"id": 3})
    client.update_record = AsyncMock(return_value={"id": 1})
    client.delete_record = AsyncMock(return_value={"id": 1})
    return client


async def test_find_all_maps_page(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    service = AdminService(make_mock_client(sample_admin_payload), TTLCache())

    page = await service.find_all(AdminQuery(resource="Role"))

    assert page.total == 2
    assert page.per_page == 10
    assert page.pages == 1
    assert page.items[0]["nombre"] == "ADMIN"


async def test_find_all_is_cached(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    client = make_mock_client(sample_admin_payload)
    service = AdminService(client, TTLCache())

    await service.find_all(AdminQuery(resource="Role"))
    await service.find_all(AdminQuery(resource="Role", filters={}))

    assert client.list_records.await_count == 1


@pytest.mark.parametrize("mutation", ["create", "update", "remove"])
async def test_mutation_invalidates_only_that_resource(
    mutation: str, sample_admin_payload: dict  # type: ignore[type-arg]
) -> None:
    client = make_mock_client(sample_admin_payload)
    cache = TTLCache()
    service = AdminService(client, cache)
    catalog_key = generate_catalog_key(1, 12)
    cache.set(catalog_key, "catalog page")

    await service.find_all(AdminQuery(resource="Role", page=1))
    await service.find_all(AdminQuery(resource="Role", page=2))
    await service.find_all(AdminQuery(resource="RoleGroup"))
    await service.find_all(AdminQuery(resource="Usuario"))

    if mutation == "create":
        await service.create("Role", {"nombre": "EDITOR"})
    elif mutation == "update":
        await service.update("Role", "1", {"nombre": "EDITOR"})
    else:
        await service.remove("Role", "1")

    keys = cache.get_stats().keys
    assert not any(k.startswith("admin:Role:") for k in keys)
    assert any(k.startswith("admin:RoleGroup:") for k in keys)
    assert any(k.startswith("admin:Usuario:") for k in keys)
    assert cache.get(catalog_key) == "catalog page"


async def test_failed_mutation_keeps_cache(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    client = make_mock_client(sample_admin_payload)
    client.create_record = AsyncMock(side_effect=ApiError(400))
    cache = TTLCache()
    service = AdminService(client, cache)

    await service.find_all(AdminQuery(resource="Role"))
    with pytest.raises(ApiError):
        await service.create("Role", {})

    assert cache.get_stats().size == 1


async def test_find_one_is_not_cached(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    client = make_mock_client(sample_admin_payload)
    cache = TTLCache()
    service = AdminService(client, cache)

    await service.find_one("Role", "1")
    await service.find_one("Role", "1")

    assert client.get_record.await_count == 2
    assert cache.get_stats().size == 0


def test_invalidate_returns_count(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    cache = TTLCache()
    cache.set(AdminQuery(resource="Role").cache_key(), "p1")
    cache.set(AdminQuery(resource="Role", page=2).cache_key(), "p2")
    service = AdminService(make_mock_client(sample_admin_payload), cache)
    assert service.invalidate("Role") == 2


@pytest.mark.parametrize("name", ["", "Role.*", "1Role", "admin:Role", "Ro le"])
def test_validate_resource_rejects_bad_names(name: str) -> None:
    with pytest.raises(ValidationError):
        validate_resource(name)


def test_validate_resource_strips_whitespace() -> None:
    assert validate_resource("  Producto_Imagen ") == "Producto_Imagen"


async def test_find_all_rejects_bad_resource_before_network(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    client = make_mock_client(sample_admin_payload)
    service = AdminService(client, TTLCache())
    with pytest.raises(ValidationError):
        await service.find_all(AdminQuery(resource="Role|User"))
    client.list_records.assert_not_awaited()


async def test_padded_resource_name_is_invalidated_by_mutation(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    """Listing and mutation must agree on the normalized resource name."""
    client = make_mock_client(sample_admin_payload)
    cache = TTLCache()
    service = AdminService(client, cache)

    await service.find_all(AdminQuery(resource=" Role"))
    assert cache.get_stats().keys == ["admin:Role:1:10::::"]
    assert client.list_records.await_args.args[0].resource == "Role"

    await service.create(" Role", {"nombre": "EDITOR"})

    assert cache.get_stats().size == 0


async def test_padded_and_plain_resource_share_cache_entry(sample_admin_payload: dict) -> None:  # type: ignore[type-arg]
    client = make_mock_client(sample_admin_payload)
    service = AdminService(client, TTLCache())

    await service.find_all(AdminQuery(resource="Role "))
    await service.find_all(AdminQuery(resource="Role"))

    assert client.list_records.await_count == 1
