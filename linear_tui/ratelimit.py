from __future__ import annotations

import threading
import time
from typing import Callable

DEFAULT_CAPACITY = 1000
DEFAULT_REFILL_PER_HOUR = 1000


class RateLimiter:
    """Token bucket guarding outbound API calls.

    Tokens are refilled lazily from elapsed wall-clock time whenever the
    bucket is consulted; there is no background timer. ``allow`` never
    blocks: a ``False`` answer is an immediate rejection.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        refill_per_hour: int = DEFAULT_REFILL_PER_HOUR,
        clock: Callable[[], float] = time.time,
    ):
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._lock = threading.Lock()
        self._clock = clock
        self.capacity = capacity
        self.refill_per_hour = refill_per_hour
        self._tokens = capacity
        self._last_refill = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed_hours = (now - self._last_refill) / 3600.0
        to_add = int(elapsed_hours * self.refill_per_hour)
        if to_add > 0:
            self._tokens = min(self._tokens + to_add, self.capacity)
            self._last_refill = now

    def allow(self) -> bool:
        with self._lock:
            self._refill()
            if self._tokens > 0:
                self._tokens -= 1
                return True
            return False

    def tokens_remaining(self) -> int:
        with self._lock:
            self._refill()
            return self._tokens
