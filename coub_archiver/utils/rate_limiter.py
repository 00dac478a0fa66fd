"""
Provides a fixed-interval rate limiter used to pace requests to the Coub CDN.
"""

import asyncio
import logging

log = logging.getLogger(__name__)


class IntervalRateLimiter:
    """
    Enforces a minimum interval between consecutive acquisitions.

    The first call never waits. An interval of zero disables pacing entirely.
    """

    def __init__(self, interval: float = 1.0, name: str = "default"):
        """
        Initializes the rate limiter.

        Args:
            interval: Minimum number of seconds between two calls.
            name: Label used in debug logs.
        """
        if interval < 0:
            raise ValueError("Interval must not be negative.")
        self.interval = interval
        self.name = name
        self._last_call_time: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """
        Waits if necessary so that at least `interval` seconds separate this call
        from the previous one.
        """
        if self.interval == 0:
            return

        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_call_time is not None:
                time_since_last = loop.time() - self._last_call_time
                if time_since_last < self.interval:
                    delay = self.interval - time_since_last
                    log.debug(f"Limiter '{self.name}' pausing {delay:.2f}s")
                    await asyncio.sleep(delay)

            self._last_call_time = loop.time()
