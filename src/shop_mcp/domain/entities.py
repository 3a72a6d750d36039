from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CacheEntry:
    """A value held by the TTL cache together with its freshness window."""

    value: Any  # Stored by reference, never copied
    stored_at: float  # Monotonic clock reading (seconds) at set() time
    ttl: float  # Positive lifetime in seconds
    sequence: int = 0  # Matches the expiry-index node written for this entry

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl

    def is_live(self, now: float) -> bool:
        """An entry is live while its age does not exceed its own ttl."""
        return now - self.stored_at <= self.ttl


@dataclass
class CacheStats:
    """Diagnostics snapshot of the cache contents."""

    size: int
    keys: list[str] = field(default_factory=list)


@dataclass
class Page:
    """One page of a paginated upstream listing."""

    items: list[dict[str, Any]]
    total: int
    page: int
    per_page: int
    pages: int  # ceil(total / per_page); 0 when there are no items
