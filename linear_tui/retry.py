from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .context import CallContext
from .diagnostics import DiagnosticSink, NullSink
from .errors import ErrorKind, LinearError, OperationCancelled
from .ratelimit import RateLimiter

T = TypeVar("T")

logger = logging.getLogger("linear_tui.retry")


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)


class RetryExecutor:
    """Run an operation with bounded exponential backoff.

    The local rate-limit check happens before every attempt and is a hard
    stop: a rejected check raises immediately and is never retried. Remote
    failures are retried only when the error classifies as retryable.
    """

    def __init__(
        self,
        limiter: Optional[RateLimiter] = None,
        config: Optional[RetryConfig] = None,
        sink: Optional[DiagnosticSink] = None,
    ):
        self.limiter = limiter or RateLimiter()
        self.config = config or RetryConfig()
        self.sink = sink or NullSink()

    def execute(self, ctx: CallContext, op: Callable[[], T]) -> T:
        cfg = self.config
        last_err: Optional[LinearError] = None
        for attempt in range(cfg.max_retries + 1):
            self.sink.log_info("Attempt %d/%d", attempt + 1, cfg.max_retries + 1)
            if not self.limiter.allow():
                self.sink.log_error("Rate limit exceeded", None)
                raise LinearError(ErrorKind.RATE_LIMIT, "rate limit exceeded", 429)
            try:
                return op()
            except LinearError as e:
                last_err = e
                self.sink.log_error(f"Request failed on attempt {attempt + 1}", e)
                if not e.retryable:
                    logger.info("Not retrying %s error: %s", e.kind.value, e.message)
                    raise
            if attempt < cfg.max_retries:
                delay = cfg.delay_for(attempt)
                logger.info("Retrying after %.1fs (attempt %d/%d): %s", delay, attempt + 1, cfg.max_retries, last_err)
                if not ctx.wait(delay):
                    self.sink.log_error("Context cancelled during retry delay", None)
                    raise OperationCancelled(ctx.reason or "cancelled") from last_err
        logger.warning("All %d attempts failed: %s", cfg.max_retries + 1, last_err)
        self.sink.log_error("All retry attempts exhausted", last_err)
        assert last_err is not None
        raise last_err
