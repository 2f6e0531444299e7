"""In-process cache of read models, invalidated by key prefix after writes.

Entries also expire after ``ttl_seconds``: writes made by another process
(a second worker) never reach this cache's invalidation, so staleness is
bounded by the TTL. Payment records are written by the monthly generation job
in its own process and are not cached here at all.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Hashable

from leasing.config import settings

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]

# Key prefixes of the cached read models
CONTRACTS_KEY: CacheKey = ("external-rental-contracts",)
UNITS_KEY: CacheKey = ("external-units",)
ACTIVE_OWNER_KEY: CacheKey = ("external-unit-owners", "active")
RECEIPTS_KEY: CacheKey = ("portal-receipts",)


class ViewCache:
    """Keyed store of computed read models.

    Keys are tuples; ``invalidate(("a",))`` drops ``("a",)``, ``("a", 1)`` and
    so on, but not ``("ab",)``.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = settings.view_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, Any]] = {}

    def _fresh(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry[0] <= self._clock():
            del self._entries[key]
            return False
        return True

    def __contains__(self, key: CacheKey) -> bool:
        return self._fresh(key)

    def __len__(self) -> int:
        self.prune()
        return len(self._entries)

    def get(self, key: CacheKey, default: Any = None) -> Any:
        if not self._fresh(key):
            return default
        return self._entries[key][1]

    def set(self, key: CacheKey, value: Any) -> None:
        self.prune()
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    async def get_or_load(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value or await ``loader`` and cache its result."""
        if self._fresh(key):
            return self._entries[key][1]
        value = await loader()
        self.set(key, value)
        return value

    def prune(self) -> int:
        """Drop expired entries. Returns the number dropped."""
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate(self, *prefixes: CacheKey) -> int:
        """Drop every key starting with one of ``prefixes``. Returns the number dropped."""
        stale = [
            key
            for key in self._entries
            if any(key[: len(prefix)] == prefix for prefix in prefixes)
        ]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached views for {prefixes}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


# Shared instance used by the API layer
view_cache = ViewCache()


__all__ = [
    "ViewCache",
    "view_cache",
    "CONTRACTS_KEY",
    "UNITS_KEY",
    "ACTIVE_OWNER_KEY",
    "RECEIPTS_KEY",
]
