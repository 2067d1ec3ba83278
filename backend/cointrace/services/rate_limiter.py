from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional


class RateLimiter:
    """
    Enforces a minimum interval between upstream requests.

    One instance is shared by every collaborator that talks to public
    explorer APIs; the lock serialises access to ``last_request_time``.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self.last_request_time: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            if self.last_request_time is not None:
                elapsed = self._clock() - self.last_request_time
                wait = self.min_interval - elapsed
                if wait > 0:
                    await self._sleep(wait)
            self.last_request_time = self._clock()

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None
