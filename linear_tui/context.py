from __future__ import annotations

import threading
import time
from typing import Callable, Optional

DEFAULT_TIMEOUT = 30.0


class CallContext:
    """Deadline plus cancellation signal carried by one service call.

    ``wait`` is the only place a call sleeps; it returns early (``False``)
    as soon as the context is cancelled or the deadline passes.
    """

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._event = threading.Event()
        self._deadline = clock() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    @property
    def expired(self) -> bool:
        rem = self.remaining()
        return rem is not None and rem <= 0

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return "cancelled"
        if self.expired:
            return "deadline exceeded"
        return ""

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; ``True`` if the full delay elapsed."""
        if self.cancelled:
            return False
        rem = self.remaining()
        if rem is not None and rem < seconds:
            self._event.wait(rem)
            return False
        return not self._event.wait(max(0.0, seconds))
