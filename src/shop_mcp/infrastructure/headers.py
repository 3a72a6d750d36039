from __future__ import annotations

from uuid import uuid4

USER_AGENT = "shop-mcp/0.1"


def make_headers(token: str | None = None) -> dict[str, str]:
    """Return the headers sent with every storefront API request.

    x-request-id is freshly generated on every call so upstream logs can be
    correlated with a single tool invocation. Authorization is only added when
    a token is configured (admin endpoints require it).
    """
    headers = {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
        "x-request-id": str(uuid4()),
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers
