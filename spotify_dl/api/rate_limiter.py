"""
Provides an adaptive rate limiter to avoid 429 "Too Many Requests" errors from the API.
"""

import asyncio
import logging
import time
from typing import Optional

log = logging.getLogger(__name__)


class AdaptiveRateLimiter:
    """
    Spaces out API calls, slowing down whenever the API answers 429.
    """

    def __init__(
        self, initial_calls_per_second: float = 10.0, max_calls_per_second: float = 15.0
    ):
        """
        Args:
            initial_calls_per_second: The starting rate of calls per second.
            max_calls_per_second: The maximum rate to recover to.
        """
        self._rate = initial_calls_per_second
        self._max_rate = max_calls_per_second
        self._min_interval = 1.0 / self._rate
        self._last_call_time = 0.0
        self._last_429_time = 0.0
        self._blocked_until = 0.0
        self._lock = asyncio.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    async def on_429(self, retry_after: Optional[float] = None) -> None:
        """
        Halves the request rate and, if the API sent a Retry-After value,
        holds back every call until it has elapsed.
        """
        async with self._lock:
            self._rate = max(1.0, self._rate * 0.5)
            self._min_interval = 1.0 / self._rate
            self._last_429_time = time.monotonic()
            if retry_after:
                self._blocked_until = time.monotonic() + retry_after
            log.warning(
                f"[yellow]Rate limit hit. New rate: {self._rate:.1f} calls/s[/yellow]"
            )

    async def acquire(self) -> None:
        """
        Waits if necessary to respect the current rate limit before allowing a call to proceed.
        """
        async with self._lock:
            now = time.monotonic()
            # Recover slowly once no 429 has been seen for five minutes
            if now - self._last_429_time > 300:
                self._rate = min(self._max_rate, self._rate * 1.005)
                self._min_interval = 1.0 / self._rate

            wait = max(
                self._blocked_until - now,
                self._min_interval - (now - self._last_call_time),
            )
            if wait > 0:
                await asyncio.sleep(wait)

            self._last_call_time = time.monotonic()
