"""Sliding-window rate limiter keeping attempt logs in process memory.

Suitable for a single worker and for tests. Each worker process keeps its own
logs, so N workers allow N times the quota; deploy the Redis limiter there.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from emojifeed.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    evaluate_window,
)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a log of attempt timestamps per key.

    A permitted attempt at ``t`` counts until ``t + window_seconds``.
    Rejected attempts are not recorded.

    Logs are pruned lazily on access. At most once per window every key
    whose newest attempt has left the window is dropped, so idle identities
    do not accumulate.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._attempts_by_key: dict[str, deque[float]] = {}
        self._next_sweep_at: float | None = None

    def _prune(self, attempts: deque[float], now: float) -> None:
        cutoff = now - self._window_seconds
        while attempts and attempts[0] <= cutoff:
            attempts.popleft()

    def _sweep(self, now: float) -> None:
        if self._next_sweep_at is not None and now < self._next_sweep_at:
            return
        cutoff = now - self._window_seconds
        stale = [key for key, attempts in self._attempts_by_key.items() if attempts[-1] <= cutoff]
        for key in stale:
            del self._attempts_by_key[key]
        self._next_sweep_at = now + self._window_seconds

    async def allow(self, key: str) -> RateLimitResult:
        """Decide whether an attempt for ``key`` is permitted and record it if so.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            self._sweep(now)
            attempts = self._attempts_by_key.get(key, deque())
            self._prune(attempts, now)
            result = evaluate_window(
                list(attempts),
                now=now,
                limit=self._limit,
                window_seconds=self._window_seconds,
            )

            if result.allowed:
                attempts.append(now)
                self._attempts_by_key[key] = attempts
            return result

