"""
/**
 * @file cache.py
 * @summary In-process bounded caches with per-entry absolute expiry.
 *
 * @details
 * - LRUCache: fixed capacity, least-recently-used eviction, lazy removal of
 *   expired entries on read.
 * - CategoryCache: shared route cache whose TTL is chosen by data category;
 *   expired entries are swept on write once the store grows past a threshold.
 * - Instances are constructed and injected explicitly (one per process).
 */
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

# Cache TTLs per data category (seconds)
CACHE_TTLS: Dict[str, int] = {
    "finance": 6 * 60 * 60,
    "votes": 30 * 60,
    "committees": 24 * 60 * 60,
    "news": 30 * 60,
    "metrics": 60 * 60,
    "compare": 30 * 60,
    "issues": 60 * 60,
}
DEFAULT_CATEGORY_TTL = 30 * 60


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class LRUCache(Generic[T]):
    """
    /**
     * Bounded key/value cache with TTL and LRU eviction.
     *
     * @param max_entries: Capacity; inserting a new key at capacity evicts
     *        exactly the least-recently-used entry.
     * @param default_ttl: TTL in seconds when set() is called without one.
     * @param clock: Wall-clock source (injectable for tests).
     */
    """

    def __init__(self, max_entries: int = 500, default_ttl: float = 1800,
                 clock: Callable[[], float] = time.time):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self.clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None):
        ttl = self.default_ttl if ttl is None else ttl
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(value=value, expires_at=self.clock() + ttl)

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self):
        self._entries.clear()

    def purge_expired(self) -> int:
        """
        /**
         * Remove every expired entry; returns the number removed.
         */
        """
        now = self.clock()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class CategoryCache:
    """
    /**
     * Route-level cache keyed by request, with TTL chosen by category.
     */
    """

    def __init__(self, max_entries: int = 5000, sweep_threshold: int = 500,
                 ttls: Optional[Dict[str, int]] = None,
                 clock: Callable[[], float] = time.time):
        self.ttls = dict(ttls or CACHE_TTLS)
        self.sweep_threshold = sweep_threshold
        self._store: LRUCache[Any] = LRUCache(max_entries=max_entries,
                                               default_ttl=DEFAULT_CATEGORY_TTL, clock=clock)

    def ttl_for(self, category: str) -> int:
        return self.ttls.get(category, DEFAULT_CATEGORY_TTL)

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def set(self, key: str, value: Any, category: str):
        self._store.set(key, value, ttl=self.ttl_for(category))
        if len(self._store) > self.sweep_threshold:
            self._store.purge_expired()

    def clear(self):
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
