"""Redis-backed sliding-window rate limiter.

Each key is a sorted set of permitted attempt timestamps. Pruning, recording
and reading the window run inside one MULTI/EXEC transaction, so concurrent
workers see an atomic check-and-record per identity. A rejected attempt is
removed again right after the transaction. Two attempts racing for the last
slot may then both be refused, never both permitted. The key expires one
window after the last attempt.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from emojifeed.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    evaluate_window,
)
from emojifeed.core.errors import UpstreamUnavailableAppError

logger = logging.getLogger(__name__)


class RedisSlidingWindowRateLimiter(AbstractRateLimiter):
    """Sliding-window limiter shared by every worker through Redis."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        limit: int,
        window_seconds: int,
        key_prefix: str = "ratelimit:posts",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._client = client
        self._limit = limit
        self._window_seconds = window_seconds
        self._key_prefix = key_prefix
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSlidingWindowRateLimiter":
        """Build a limiter with its own connection pool."""
        client = redis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    async def allow(self, key: str) -> RateLimitResult:
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        redis_key = self._key(key)
        member = f"{now:.6f}:{uuid.uuid4().hex}"

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(redis_key, "-inf", now - self._window_seconds)
                pipe.zadd(redis_key, {member: now})
                pipe.zrange(redis_key, 0, -1, withscores=True)
                pipe.pexpire(redis_key, self._window_seconds * 1000)
                _, _, entries, _ = await pipe.execute()
        except (RedisError, OSError) as exc:
            logger.error(
                "rate_limit.redis_error",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            raise UpstreamUnavailableAppError(
                code="rate_limit_unavailable",
                message="The rate limit backend is unavailable.",
                details={"upstream": "rate_limit"},
            ) from exc

        timestamps = [float(score) for name, score in entries if name != member]
        result = evaluate_window(
            timestamps,
            now=now,
            limit=self._limit,
            window_seconds=self._window_seconds,
        )
        if not result.allowed:
            await self._forget(redis_key, member)
        return result

    async def _forget(self, redis_key: str, member: str) -> None:
        try:
            await self._client.zrem(redis_key, member)
        except (RedisError, OSError) as exc:
            # The stray member only tightens the window until it expires.
            logger.warning(
                "rate_limit.redis_cleanup_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )

    async def close(self) -> None:
        await self._client.aclose()
