from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import re
import time
from collections.abc import Callable
from typing import Any

from shop_mcp.domain.entities import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300.0  # seconds
SWEEP_INTERVAL = 600.0  # seconds; fixed, not read from the environment

# Rebuild the expiry heap once stale nodes outnumber live entries by this factor
_COMPACT_RATIO = 2
_COMPACT_MIN_NODES = 64


def _monotonic() -> float:
    return time.monotonic()


class TTLCache:
    """In-process TTL cache with regex invalidation and a periodic sweep.

    Designed for a single asyncio event loop: every method runs to completion
    synchronously, and the sweep task runs on the same loop, so no locking is
    done. Sharing an instance across threads is not supported.

    Expiry is tracked in a min-heap of ``(expires_at, sequence, key)`` nodes.
    ``get`` expires lazily on read; ``sweep`` pops only the nodes that have
    already expired. Nodes left behind by overwrites or deletes no longer match
    their entry's sequence and are skipped.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        sweep_interval: float = SWEEP_INTERVAL,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be positive")
        self._default_ttl = default_ttl
        self._sweep_interval = sweep_interval
        self._clock = clock if clock is not None else _monotonic
        self._store: dict[str, CacheEntry] = {}
        self._expiry: list[tuple[float, int, str]] = []
        self._sequence = itertools.count()
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def sweep_interval(self) -> float:
        return self._sweep_interval

    @property
    def running(self) -> bool:
        """True while the background sweep task is scheduled."""
        return self._sweep_task is not None and not self._sweep_task.done()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        entry = self._store.get(key)
        return entry is not None and not self._expired(entry, self._clock())

    @staticmethod
    def _expired(entry: CacheEntry, now: float) -> bool:
        return not entry.is_live(now)

    def get(self, key: str) -> Any | None:
        """Return cached value or None if missing or expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._store[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store value with given TTL (seconds). Uses default_ttl when ttl is None."""
        if not key:
            raise ValueError("Cache key cannot be empty")
        effective_ttl = ttl if ttl is not None else self._default_ttl
        if effective_ttl <= 0:
            raise ValueError("ttl must be positive")
        sequence = next(self._sequence)
        entry = CacheEntry(value=value, stored_at=self._clock(), ttl=effective_ttl, sequence=sequence)
        self._store[key] = entry
        heapq.heappush(self._expiry, (entry.expires_at, sequence, key))
        self._maybe_compact()

    def delete(self, key: str) -> bool:
        """Remove a specific key immediately. Returns whether it existed."""
        return self._store.pop(key, None) is not None

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key the regular expression matches anywhere; return the count.

        The pattern is used as-is. Callers building it from literal text must
        escape it themselves (see ``shop_mcp.domain.keys.admin_resource_pattern``).
        """
        regex = re.compile(pattern)
        matched = [k for k in self._store if regex.search(k)]
        for k in matched:
            del self._store[k]
        self._maybe_compact()
        return len(matched)

    def clear(self) -> None:
        """Remove all cached entries."""
        self._store.clear()
        self._expiry.clear()

    def get_stats(self) -> CacheStats:
        """Entry count and key snapshot. Expired entries awaiting a sweep are included."""
        return CacheStats(size=len(self._store), keys=list(self._store))

    def sweep(self) -> int:
        """Remove all expired entries from the store. Returns the number removed."""
        now = self._clock()
        removed = 0
        while self._expiry and self._expiry[0][0] < now:
            _, sequence, key = heapq.heappop(self._expiry)
            entry = self._store.get(key)
            # Stale node: key was deleted or overwritten after this node was pushed
            if entry is None or entry.sequence != sequence:
                continue
            if not self._expired(entry, now):
                # Float rounding at the boundary; entry is still live
                heapq.heappush(self._expiry, (entry.expires_at, sequence, key))
                break
            del self._store[key]
            removed += 1
        if removed:
            logger.debug("Swept %d expired cache entries", removed)
        return removed

    def _maybe_compact(self) -> None:
        if len(self._expiry) < _COMPACT_MIN_NODES:
            return
        if len(self._expiry) <= _COMPACT_RATIO * max(len(self._store), 1):
            return
        self._expiry = [(e.expires_at, e.sequence, k) for k, e in self._store.items()]
        heapq.heapify(self._expiry)

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop. Idempotent."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._sweep_task = loop.create_task(self._sweep_loop(), name="ttl-cache-sweep")
        logger.info("Cache sweep started (interval %.0fs)", self._sweep_interval)

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        task = self._sweep_task
        self._sweep_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Cache sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
