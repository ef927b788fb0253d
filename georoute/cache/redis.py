"""Redis-backed route cache shared between worker processes."""

import json
import math
import time
from typing import Callable, Optional

from georoute.cache.base import RouteCache
from georoute.domain import RouteResult, RouteSource
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache/redis")


class RedisRouteCache(RouteCache):
    """Routes stored as JSON with SETEX; freshness is re-checked on read.

    Redis failures never reach the caller: reads degrade to a miss and
    writes to a no-op, both logged.
    """

    def __init__(
        self,
        client,
        ttl_seconds: float = 300.0,
        prefix: str = "route:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        logger.debug("Initializing RedisRouteCache")
        self.client = client
        self.ttl = ttl_seconds
        self.prefix = prefix
        self._clock = clock

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @staticmethod
    def _dump(value: RouteResult, inserted_at: float) -> bytes:
        data = {
            "distance_km": value.distance_km,
            "travel_time_minutes": value.travel_time_minutes,
            "travel_time_minutes_no_traffic": value.travel_time_minutes_no_traffic,
            "source": value.source.value,
            "inserted_at": inserted_at,
        }
        return json.dumps(data).encode("utf-8")

    @staticmethod
    def _load(raw: bytes | str) -> Optional[tuple[RouteResult, float]]:
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            data = json.loads(raw)
            result = RouteResult.build(
                data["distance_km"],
                data["travel_time_minutes"],
                data["travel_time_minutes_no_traffic"],
                source=RouteSource(data["source"]),
            )
            return result, float(data["inserted_at"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable cached route: %s", exc)
            return None

    def get(self, key: str) -> Optional[RouteResult]:
        try:
            raw = self.client.get(self._key(key))
        except Exception as exc:
            logger.warning("Failed to read route from Redis: %s", exc)
            return None
        if not raw:
            return None
        loaded = self._load(raw)
        if loaded is None:
            return None
        result, inserted_at = loaded
        if self._clock() - inserted_at >= self.ttl:
            return None
        return result

    def set(self, key: str, value: RouteResult) -> None:
        payload = self._dump(value, self._clock())
        try:
            self.client.setex(self._key(key), max(1, math.ceil(self.ttl)), payload)
        except Exception as exc:
            logger.warning("Failed to write route to Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort clear of every route under the configured prefix."""
        try:
            for k in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(k)
        except Exception as exc:
            logger.warning("Failed to clear routes from Redis: %s", exc)
