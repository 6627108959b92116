# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-user chat rate limiting."""

from src.infrastructure.rate_limit.counter_store import (
    CounterStore,
    InMemoryCounterStore,
    RedisCounterStore,
)
from src.infrastructure.rate_limit.limiter import (
    RATE_LIMIT_MESSAGE,
    FixedWindowRateLimiter,
    create_rate_limiter,
)

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "FixedWindowRateLimiter",
    "RATE_LIMIT_MESSAGE",
    "create_rate_limiter",
]
