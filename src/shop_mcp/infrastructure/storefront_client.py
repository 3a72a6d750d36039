from __future__ import annotations

import json
from typing import Any

import httpx

from shop_mcp.domain.exceptions import ApiError
from shop_mcp.domain.keys import AdminQuery, CatalogQuery
from shop_mcp.infrastructure.headers import make_headers


class StorefrontClient:
    """HTTP client for the storefront REST API.

    A single httpx.AsyncClient instance is shared for the process lifetime.
    The client never caches; memoization is done by the application services.
    """

    def __init__(self, base_url: str, http_client: httpx.AsyncClient, token: str | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client
        self._token = token

    async def list_products(self, query: CatalogQuery) -> dict[str, Any]:
        """GET /catalog/productos: public product listing."""
        params: dict[str, Any] = {"page": query.page, "perPage": query.per_page}
        optional = {
            "q": query.q,
            "marca": query.marca,
            "categoria": query.categoria,
            "minPrice": query.min_price,
            "maxPrice": query.max_price,
            "sort": query.sort.value if query.sort is not None else None,
        }
        params.update({k: v for k, v in optional.items() if v is not None and v != ""})
        return await self._request("GET", "/catalog/productos", params=params)

    async def list_records(self, query: AdminQuery) -> dict[str, Any]:
        """GET /admin/tables/{resource}/records; filters travel as a JSON string."""
        params: dict[str, Any] = {"page": query.page, "limit": query.limit}
        if query.search:
            params["search"] = query.search
        if query.filters:
            params["filters"] = json.dumps(dict(query.filters), separators=(",", ":"))
        if query.sort_by:
            params["sortBy"] = query.sort_by
        if query.sort_dir is not None:
            params["sortDir"] = query.sort_dir.value
        return await self._request("GET", f"/admin/tables/{query.resource}/records", params=params)

    async def get_record(self, resource: str, record_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/admin/tables/{resource}/records/{record_id}")

    async def create_record(self, resource: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/admin/tables/{resource}/records", json_body=data)

    async def update_record(self, resource: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/admin/tables/{resource}/records/{record_id}", json_body=data)

    async def delete_record(self, resource: str, record_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/admin/tables/{resource}/records/{record_id}")

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Internal request helper.

        1. Call httpx with make_headers() (bearer token when configured).
        2. Raise ApiError on non-2xx status.
        3. Return the decoded JSON body ({} for an empty body).
        """
        url = f"{self._base_url}{path}"
        response = await self._http.request(
            method,
            url,
            params=params,
            json=json_body,
            headers=make_headers(self._token),
        )
        self._raise_for_status(response)
        if not response.content:
            return {}
        data: dict[str, Any] = response.json()
        return data

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise ApiError for non-2xx responses."""
        if response.status_code == 404:
            raise ApiError(404, f"Resource not found (404): {response.url}")
        if response.status_code >= 400:
            raise ApiError(response.status_code)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
