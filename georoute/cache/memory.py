"""In-memory coordinate and route caches, bounded and lock-guarded."""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from georoute.cache.base import CacheEntry, CoordinateCache, RouteCache
from georoute.domain import Coordinates, RouteResult
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache/memory")


class InMemoryCoordinateCache(CoordinateCache):
    """LRU coordinate cache; entries never expire, the oldest are evicted past `max_entries`."""

    def __init__(self, max_entries: int = 10000) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Coordinates] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Coordinates]:
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Coordinates) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while self.max_entries > 0 and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted coordinate cache entry", extra={"key": evicted})

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryRouteCache(RouteCache):
    """Thread-safe, TTL-aware route cache.

    An entry is fresh while `now - inserted_at < ttl_seconds`; stale entries
    are dropped when read. `clock` returns epoch seconds and is injectable
    for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        logger.debug("Initializing InMemoryRouteCache")
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[RouteResult]] = OrderedDict()
        self._lock = threading.Lock()

    def _is_fresh(self, entry: CacheEntry[RouteResult]) -> bool:
        return self._clock() - entry.inserted_at < self.ttl

    def get(self, key: str) -> Optional[RouteResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry):
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: RouteResult) -> None:
        with self._lock:
            # last write wins
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
            while self.max_entries > 0 and len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
