"""ConcurrencyLimiter - caps how many image jobs run at once."""

from __future__ import annotations

import asyncio
from types import TracebackType


class ConcurrencyLimiter:
    """
    Bounded gate over ``asyncio.Semaphore``.

    - At most ``limit`` holders at any time
    - Waiters are woken in FIFO order, no priority, no timeout
    - ``active`` / ``peak`` are kept for instrumentation

    Example:
        limiter = ConcurrencyLimiter(4)
        async with limiter:
            await do_work()
    """

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError(f"Concurrency limit must be >= 1, got {limit}")
        self.limit: int = limit
        self.active: int = 0
        self.peak: int = 0
        self._semaphore: asyncio.Semaphore = asyncio.Semaphore(limit)

    async def acquire(self) -> None:
        _ = await self._semaphore.acquire()
        self.active += 1
        self.peak = max(self.peak, self.active)

    def release(self) -> None:
        if self.active == 0:
            raise RuntimeError("release() called more times than acquire()")
        self.active -= 1
        self._semaphore.release()

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
