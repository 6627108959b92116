# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixed-window counter storage for the chat rate limiter.

Two interchangeable stores keep the same contract (one counter per key,
reset when its window elapses):
- InMemoryCounterStore: single-instance deployments and tests
- RedisCounterStore: shared counters across instances
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class CounterStore(ABC):
    """Storage for per-key fixed-window counters."""

    @abstractmethod
    async def hit(self, key: str, window_seconds: int) -> int:
        """Count one request for key and return the count in the current window."""

    @abstractmethod
    async def peek(self, key: str, window_seconds: int) -> int:
        """Return the count in the current window without counting a request."""

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget the counter for key."""


@dataclass
class _Window:
    count: int
    started_at: float


class InMemoryCounterStore(CounterStore):
    """Process-local counters guarded by a lock.

    Each key holds a monotonic counter and the timestamp its window started.
    A hit either increments the counter or, if the window has elapsed,
    resets it to one; both happen under the same lock, so concurrent hits
    never lose an increment or double-reset a window.

    Elapsed windows are swept at most once per window length, so keys of
    users who stopped sending do not accumulate.

    Attributes:
        clock: Monotonic time source in seconds. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _sweep(self, now: float, window_seconds: int) -> None:
        # Caller holds the lock
        if now - self._last_sweep < window_seconds:
            return
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug("Evicted %d expired rate limit windows", len(expired))

    async def hit(self, key: str, window_seconds: int) -> int:
        now = self.clock()
        with self._lock:
            self._sweep(now, window_seconds)
            window = self._windows.get(key)
            if window is None or now - window.started_at >= window_seconds:
                self._windows[key] = _Window(count=1, started_at=now)
                return 1
            window.count += 1
            return window.count

    async def peek(self, key: str, window_seconds: int) -> int:
        now = self.clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at >= window_seconds:
                return 0
            return window.count

    async def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def __len__(self) -> int:
        return len(self._windows)


class RedisCounterStore(CounterStore):
    """Redis-backed counters using INCR with an expiry set on first hit.

    Fails open: if Redis is unreachable the hit counts as zero and the
    request is allowed.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    @classmethod
    def from_url(cls, url: str) -> "RedisCounterStore":
        """Create a store with its own connection pool.

        Args:
            url: Redis connection URL.
        """
        return cls(Redis.from_url(url, decode_responses=True))

    async def hit(self, key: str, window_seconds: int) -> int:
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                # Only the first hit of a window sets the TTL
                pipe.expire(key, window_seconds, nx=True)
                count, _ = await pipe.execute()
            return int(count)
        except RedisError as e:
            logger.warning("Rate limit check failed, allowing request: %s", e)
            return 0

    async def peek(self, key: str, window_seconds: int) -> int:
        try:
            current = await self._redis.get(key)
        except RedisError as e:
            logger.warning("Rate limit lookup failed: %s", e)
            return 0
        return int(current) if current is not None else 0

    async def reset(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as e:
            logger.warning("Rate limit reset failed: %s", e)

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._redis.aclose()
