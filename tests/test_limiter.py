"""Unit tests for ConcurrencyLimiter."""

import asyncio

import pytest

from cl_imgset.common.limiter import ConcurrencyLimiter


def test_limit_must_be_positive():
    """Test a zero limit is rejected."""
    with pytest.raises(ValueError):
        _ = ConcurrencyLimiter(0)


@pytest.mark.asyncio
async def test_release_without_acquire_raises():
    """Test unbalanced release() is reported instead of silently raising the bound."""
    limiter = ConcurrencyLimiter(2)
    with pytest.raises(RuntimeError):
        limiter.release()


@pytest.mark.asyncio
async def test_never_exceeds_limit():
    """Test that 10 jobs through a limit of 2 never run more than 2 at once."""
    limiter = ConcurrencyLimiter(2)
    running = 0
    max_running = 0

    async def job() -> None:
        nonlocal running, max_running
        async with limiter:
            running += 1
            max_running = max(max_running, running)
            await asyncio.sleep(0.01)
            running -= 1

    _ = await asyncio.gather(*(job() for _ in range(10)))

    assert max_running == 2
    assert limiter.peak == 2
    assert limiter.active == 0


@pytest.mark.asyncio
async def test_waiters_are_served_fifo():
    """Test a released slot goes to the oldest waiter."""
    limiter = ConcurrencyLimiter(1)
    await limiter.acquire()
    order: list[int] = []

    async def waiter(index: int) -> None:
        async with limiter:
            order.append(index)

    tasks = [asyncio.create_task(waiter(i)) for i in range(5)]
    await asyncio.sleep(0)  # let every waiter queue up
    assert order == []

    limiter.release()
    _ = await asyncio.gather(*tasks)

    assert order == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_slot_released_on_exception():
    """Test the context manager frees its slot when the body raises."""
    limiter = ConcurrencyLimiter(1)

    with pytest.raises(KeyError):
        async with limiter:
            raise KeyError("boom")

    assert limiter.active == 0
    async with limiter:
        assert limiter.active == 1
