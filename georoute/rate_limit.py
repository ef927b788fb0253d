"""Process-wide request spacing for rate-limited public services."""

import threading
import time
from typing import Callable

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="rate_limit")


class MinIntervalLimiter:
    """Thread-safe limiter that keeps at least `min_interval` seconds between acquisitions."""

    def __init__(
        self,
        min_interval_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float | None = None
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until the next slot is free; return the seconds waited."""
        with self._lock:
            now = self._clock()
            wait = 0.0
            if self._next_slot is not None and self._next_slot > now:
                wait = self._next_slot - now
            if wait > 0:
                logger.debug("Throttling request", extra={"wait_seconds": round(wait, 3)})
                self._sleep(wait)
            self._next_slot = max(now, self._next_slot or now) + self.min_interval
            return wait
