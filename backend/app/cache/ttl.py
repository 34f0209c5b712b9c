"""
Time-to-live cache for upstream tool results.

    cache = TTLCache(10)              # 10 minute TTL
    cache.set("weather:bern", data)
    cache.get("weather:bern")         # None once expired

Expired entries are evicted lazily on get()/has(), or in bulk by cleanup(),
which the owner has to call; nothing is scheduled here.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheEntry(Generic[T]):
    data: T
    timestamp: int                        # epoch ms


class TTLCache(Generic[T]):
    def __init__(self, ttl_minutes: float = 5, clock: Callable[[], int] = now_ms):
        self.ttl_ms = ttl_minutes * 60 * 1000
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def _expired(self, entry: CacheEntry[T], now: int) -> bool:
        return now - entry.timestamp > self.ttl_ms

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.data

    def set(self, key: str, data: T) -> None:
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Entry count, including expired entries nobody has read yet."""
        return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def cleanup(self) -> int:
        now = self._clock()
        # snapshot: set() may run concurrently from another request thread
        expired = [k for k, entry in list(self._entries.items()) if self._expired(entry, now)]
        removed = 0
        for k in expired:
            entry = self._entries.get(k)
            # skip keys rewritten since the snapshot
            if entry is not None and self._expired(entry, now) and self._entries.pop(k, None) is not None:
                removed += 1
        if removed:
            logger.debug("TTLCache cleanup removed=%d remaining=%d", removed, len(self._entries))
        return removed


def cached_call(cache: TTLCache[T], key: str, fetch: Callable[[], T]) -> T:
    """
    Return the cached value for key, or fetch() and store it.

    Failures of the cache itself are logged and ignored so a broken cache only
    costs an extra upstream call. Errors from fetch() propagate.
    """
    try:
        hit = cache.get(key)
    except Exception as e:
        logger.warning("Cache read failed key=%s error=%r", key, e)
        hit = None

    if hit is not None:
        logger.debug("Cache hit key=%s", key)
        return hit

    data = fetch()

    try:
        cache.set(key, data)
    except Exception as e:
        logger.warning("Cache write failed key=%s error=%r", key, e)

    return data
