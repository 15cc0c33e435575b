"""Client-side request pacing for RPC traffic.

Every JSON-RPC request made through :func:`datatoken_paths.core.utils.web3._get_web3`
passes through the process-wide limiter returned by :func:`get_rate_limiter`.
The default is unlimited; set ``CONFIG["rpc"]["requests_per_second"]`` or call
:func:`set_rate_limiter` to pace estimation, submission and receipt polling.
"""

from __future__ import annotations

import asyncio
import math
import time
import weakref
from collections.abc import Awaitable, Callable

from loguru import logger

from datatoken_paths.core.config import get_requests_per_second


class RateLimiter:
    """Token bucket: ``rate`` tokens per second, holding at most ``burst``."""

    def __init__(
        self,
        rate: float,
        burst: int | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.rate = float(rate)
        self.burst = max(1, int(burst if burst is not None else math.ceil(rate)))
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(self.burst)
        self._updated = clock()
        # one lock per event loop; the limiter outlives any single asyncio.run
        self._locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, asyncio.Lock
        ] = weakref.WeakKeyDictionary()

    def _loop_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        return lock

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._updated = now

    async def acquire(self) -> None:
        async with self._loop_lock():
            self._refill()
            while self._tokens < 1:
                wait_s = (1 - self._tokens) / self.rate
                await self._sleep(wait_s)
                self._refill()
            self._tokens -= 1

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *exc) -> None:
        return None

    def __repr__(self) -> str:
        return f"RateLimiter(rate={self.rate}, burst={self.burst})"


class UnlimitedRateLimiter(RateLimiter):
    def __init__(self):
        pass

    async def acquire(self) -> None:
        return None

    def __repr__(self) -> str:
        return "UnlimitedRateLimiter()"


UNLIMITED = UnlimitedRateLimiter()

_rate_limiter: RateLimiter | None = None


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Install a process-wide limiter. ``None`` re-reads CONFIG on next use."""
    global _rate_limiter
    _rate_limiter = limiter


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        rate = get_requests_per_second()
        if rate is None:
            _rate_limiter = UNLIMITED
        else:
            logger.debug(f"RPC requests limited to {rate}/s")
            _rate_limiter = RateLimiter(rate)
    return _rate_limiter
