"""
In-memory sliding window rate limiter.

Counts are per process, so each worker enforces its own budget. Suitable
for single-instance deployments.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict

from src.app.services.rate_limiter import RateLimit, RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


class MemoryRateLimiter(RateLimiter):
    def __init__(
        self,
        cleanup_interval_seconds: int = 300,
        max_tracked_keys: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self.max_tracked_keys = max_tracked_keys
        self.clock = clock

        # key -> timestamps of counted requests, oldest first
        self._hits: Dict[str, Deque[float]] = {}
        # key -> window of the rule it was last checked under
        self._windows: Dict[str, int] = {}
        self._last_cleanup = clock()

    async def hit(self, key: str, rule: RateLimit) -> RateLimitResult:
        # No await between reading and recording: check-and-count is atomic
        # on the event loop
        now = self.clock()
        self._cleanup_if_needed(now)

        hits = self._hits.get(key)
        if hits is None:
            if len(self._hits) >= self.max_tracked_keys:
                logger.warning(f"Rate limiter at capacity ({self.max_tracked_keys} keys)")
                return RateLimitResult(allowed=True, limit=rule.limit, remaining=0)
            hits = self._hits[key] = deque()
        self._windows[key] = rule.window_seconds

        window_start = now - rule.window_seconds
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= rule.limit:
            retry_after = max(1, math.ceil(hits[0] + rule.window_seconds - now))
            logger.debug(f"Rate limit exceeded: {len(hits)}/{rule.limit}")
            return RateLimitResult(
                allowed=False, limit=rule.limit, remaining=0, retry_after=retry_after
            )

        hits.append(now)
        return RateLimitResult(allowed=True, limit=rule.limit, remaining=rule.limit - len(hits))

    def _cleanup_if_needed(self, now: float) -> None:
        """Drop keys whose every hit is outside their window"""
        if now - self._last_cleanup < self.cleanup_interval_seconds:
            return
        self._last_cleanup = now

        expired = [
            key
            for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._windows.get(key, 0)
        ]
        for key in expired:
            del self._hits[key]
            self._windows.pop(key, None)

        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired rate limit keys")
