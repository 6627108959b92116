# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-user fixed-window rate limiter for chat requests.

The limiter runs before any model or tool work, so a rejected request
has no side effects.

Example:
    limiter = create_rate_limiter(get_settings())

    if not await limiter.allow(user_id):
        return ChatReply.rate_limited()
"""

import logging
from typing import TYPE_CHECKING

from src.infrastructure.rate_limit.counter_store import (
    CounterStore,
    InMemoryCounterStore,
    RedisCounterStore,
)

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a minute before sending more messages."


class FixedWindowRateLimiter:
    """Fixed-window request limiter keyed by user.

    Attributes:
        max_requests: Maximum requests allowed per window.
        window_seconds: Window length in seconds.
        key_prefix: Namespace for counter keys.
    """

    def __init__(
        self,
        store: CounterStore,
        max_requests: int = 60,
        window_seconds: int = 60,
        key_prefix: str = "chat",
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")

        self._store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix

    def _get_key(self, user_id: str) -> str:
        return f"ratelimit:{self.key_prefix}:{user_id}"

    async def allow(self, user_id: str) -> bool:
        """Count a request and check whether it is within the limit.

        Args:
            user_id: User making the request.

        Returns:
            True if the request is allowed, False if rate limited.
        """
        count = await self._store.hit(self._get_key(user_id), self.window_seconds)

        if count > self.max_requests:
            logger.info(
                "Rate limited: %s (count: %d, max: %d)",
                user_id,
                count,
                self.max_requests,
            )
            return False

        return True

    async def remaining(self, user_id: str) -> int:
        """Get remaining requests for user in the current window."""
        count = await self._store.peek(self._get_key(user_id), self.window_seconds)
        return max(0, self.max_requests - count)

    async def reset(self, user_id: str) -> None:
        """Reset the counter for user."""
        await self._store.reset(self._get_key(user_id))
        logger.debug("Rate limit reset for: %s", user_id)


def create_rate_limiter(settings: "Settings") -> FixedWindowRateLimiter:
    """Create the chat rate limiter with the configured backend.

    Args:
        settings: Application settings.

    Returns:
        Configured FixedWindowRateLimiter.
    """
    if settings.rate_limit.backend == "redis":
        store: CounterStore = RedisCounterStore.from_url(settings.redis.url)
    else:
        store = InMemoryCounterStore()

    logger.info(
        "Rate limiter: backend=%s, max_requests=%d, window=%ds",
        settings.rate_limit.backend,
        settings.rate_limit.max_requests,
        settings.rate_limit.window_seconds,
    )

    return FixedWindowRateLimiter(
        store=store,
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
    )
