"""Request spacing for strict-rate-limit venues (e.g. Kraken) and backoff on 429."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class RequestSpacer:
    """FIFO gate enforcing a minimum interval between requests of one client.

    Owned by a single venue client instance, never shared across venues. Callers
    are admitted in arrival order (asyncio.Lock wakes waiters FIFO); each request
    runs while holding the gate, so at most one is in flight.
    """

    def __init__(
        self,
        min_interval_sec: float = 1.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval_sec < 0:
            raise ValueError("min_interval_sec must be non-negative")
        self.min_interval_sec = min_interval_sec
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = asyncio.Lock()

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Wait for our turn and spacing, then await fn()."""
        async with self._lock:
            if self._last is not None:
                wait = self.min_interval_sec - (self._clock() - self._last)
                if wait > 0:
                    await self._sleep(wait)
            self._last = self._clock()
            return await fn()


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Delay in seconds before retry number attempt+1 after a rate limit. Exponential."""
    return base_delay * (2 ** attempt)
