"""
albnet/cache/ttl.py - Namespaced TTL cache

Process-lifetime memoization store shared by every resolver. Entries expire
passively: a read after the entry's expiry is a miss and drops the entry.
There is no capacity bound and no background eviction.

The cache is constructed once and handed to each resolver, which takes typed
views over its own namespace:

    cache = TTLCache()
    subnet_ids = cache.namespace("EC2.GetSubnets", ttl=timedelta(minutes=60))

    subnet_ids.set("subnet-a", "subnet-001")
    subnet_ids.get("subnet-a")  # "subnet-001" until the ttl elapses
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from threading import RLock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TTL = timedelta | float


def _to_seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


@dataclass(frozen=True)
class CacheEntry:
    """Single cache entry, replaced wholesale on every set"""

    namespace: str
    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Thread-safe namespaced cache with per-entry expiry

    Args:
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    def get(self, namespace: str, key: str) -> Any | None:
        """Get a live value, or None on miss/expiry"""
        with self._lock:
            entry = self._entries.get((namespace, key))

            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[(namespace, key)]
                self._misses += 1
                return None

            self._hits += 1
            return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl: TTL) -> None:
        """Store value under (namespace, key) for ttl (timedelta or seconds)"""
        with self._lock:
            self._entries[(namespace, key)] = CacheEntry(
                namespace=namespace,
                key=key,
                value=value,
                expires_at=self._clock() + _to_seconds(ttl),
            )

    def namespace(self, name: str, ttl: TTL) -> CacheNamespace[Any]:
        """Typed view over one namespace with a default ttl"""
        return CacheNamespace(self, name, ttl)

    def purge_expired(self) -> int:
        """Remove expired entries

        Never called by the cache itself; long-running callers may sweep
        periodically to bound memory.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
            for k in expired:
                del self._entries[k]
            if expired:
                logger.debug("purged %d expired cache entries", len(expired))
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total_requests if total_requests > 0 else 0.0,
            }

    def __repr__(self) -> str:
        stats = self.stats
        return f"TTLCache(entries={stats['entries']}, hit_rate={stats['hit_rate']:.1%})"


class CacheNamespace(Generic[T]):
    """View of a TTLCache restricted to one namespace and value type"""

    def __init__(self, cache: TTLCache, name: str, ttl: TTL):
        self._cache = cache
        self.name = name
        self.ttl = ttl

    def get(self, key: str) -> T | None:
        value: T | None = self._cache.get(self.name, key)
        return value

    def set(self, key: str, value: T, ttl: TTL | None = None) -> None:
        self._cache.set(self.name, key, value, self.ttl if ttl is None else ttl)

    def __repr__(self) -> str:
        return f"CacheNamespace(name={self.name!r}, ttl={self.ttl!r})"
