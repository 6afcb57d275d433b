"""Fixed-interval gate shared by all Slack calls of a run."""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import time

DEFAULT_MIN_INTERVAL_S = 1.1

type ClockFn = cabc.Callable[[], float]
type SleepFn = cabc.Callable[[float], cabc.Awaitable[None]]


class RateLimiter:
    """Enforce a minimum spacing between permitted calls.

    The first call passes immediately; each later call waits until
    ``min_interval_s`` has elapsed since the previous permitted call. Callers
    serialize through a single lock so concurrent waiters cannot be released
    together.

    Parameters
    ----------
    min_interval_s
        Minimum number of seconds between two permitted calls.
    clock
        Monotonic clock returning seconds.
    sleep
        Coroutine used to wait.

    """

    def __init__(
        self,
        min_interval_s: float = DEFAULT_MIN_INTERVAL_S,
        *,
        clock: ClockFn = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Create a limiter with the given spacing."""
        if min_interval_s < 0:
            msg = f"min_interval_s must be non-negative, got {min_interval_s}"
            raise ValueError(msg)
        self._min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_permitted: float | None = None

    @property
    def min_interval_s(self) -> float:
        """Configured spacing in seconds."""
        return self._min_interval_s

    async def wait(self) -> None:
        """Suspend until the next call is permitted."""
        async with self._lock:
            if self._last_permitted is not None:
                elapsed = self._clock() - self._last_permitted
                remaining = self._min_interval_s - elapsed
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_permitted = self._clock()
