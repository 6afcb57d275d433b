"""Unit tests for the fixed-interval Slack rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from slackdigest.slack import RateLimiter


class _FakeClock:
    """Manual monotonic clock advanced by the fake sleep."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> _FakeClock:
    """Return a fresh fake clock."""
    return _FakeClock()


@pytest.mark.asyncio
async def test_first_call_passes_immediately(clock: _FakeClock) -> None:
    """The first wait does not sleep."""
    limiter = RateLimiter(1.1, clock=clock, sleep=clock.sleep)

    await limiter.wait()

    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_back_to_back_calls_are_spaced(clock: _FakeClock) -> None:
    """Consecutive waits sleep for the full interval."""
    limiter = RateLimiter(1.1, clock=clock, sleep=clock.sleep)

    await limiter.wait()
    await limiter.wait()
    await limiter.wait()

    assert clock.sleeps == pytest.approx([1.1, 1.1])


@pytest.mark.asyncio
async def test_elapsed_time_is_credited(clock: _FakeClock) -> None:
    """Only the remainder of the interval is slept."""
    limiter = RateLimiter(1.1, clock=clock, sleep=clock.sleep)

    await limiter.wait()
    clock.now += 0.6
    await limiter.wait()

    assert clock.sleeps == pytest.approx([0.5])


@pytest.mark.asyncio
async def test_no_sleep_after_interval_elapsed(clock: _FakeClock) -> None:
    """Waits after a long pause pass without sleeping."""
    limiter = RateLimiter(1.1, clock=clock, sleep=clock.sleep)

    await limiter.wait()
    clock.now += 5.0
    await limiter.wait()

    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_concurrent_waiters_are_serialized(clock: _FakeClock) -> None:
    """Concurrent callers are released one interval apart."""
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)
    released: list[float] = []

    async def call() -> None:
        await limiter.wait()
        released.append(clock.now)

    await asyncio.gather(*(call() for _ in range(4)))

    assert released == pytest.approx([100.0, 101.0, 102.0, 103.0])


def test_negative_interval_rejected() -> None:
    """A negative interval raises ValueError."""
    with pytest.raises(ValueError, match="non-negative"):
        RateLimiter(-0.1)


def test_default_interval() -> None:
    """The default spacing is 1.1 seconds."""
    assert RateLimiter().min_interval_s == pytest.approx(1.1)
