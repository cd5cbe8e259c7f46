"""Rate limiting adapters.

A small abstraction layer so a single process can start with the in-memory
limiter and move to Redis without changing the service layer.
"""

from emojifeed.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from emojifeed.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from emojifeed.adapters.rate_limit.redis_backend import RedisSlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
    "RedisSlidingWindowRateLimiter",
]
