"""Rate limiter interfaces.

Callers depend on this abstraction (not the concrete implementation) so the
counter storage can move between the process and Redis without changes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the attempt is permitted.
        limit: Max attempts per window.
        remaining: Attempts left in the trailing window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted attempt leaves
            the window.
        retry_after_seconds: Wait time until an attempt would be permitted,
            set only when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for sliding-window rate limiters.

    Only permitted attempts are recorded; a rejected attempt leaves the window
    untouched. The check-and-record must be atomic per key.
    """

    @abstractmethod
    async def allow(self, key: str) -> RateLimitResult:
        """Decide whether an attempt for ``key`` is permitted and record it if so.

        Args:
            key: Identity to limit (e.g., an author id).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources. No-op by default."""


def evaluate_window(
    timestamps: Sequence[float],
    *,
    now: float,
    limit: int,
    window_seconds: int,
) -> RateLimitResult:
    """Build the decision for an attempt from the in-window timestamps.

    Args:
        timestamps: Ascending times of the permitted attempts inside the
            window, excluding the attempt being evaluated.
        now: Time of the attempt being evaluated.
        limit: Max attempts per window.
        window_seconds: Window size in seconds.

    Returns:
        RateLimitResult for the attempt.
    """
    count = len(timestamps)

    if count < limit:
        oldest = timestamps[0] if timestamps else now
        return RateLimitResult(
            allowed=True,
            limit=limit,
            remaining=limit - count - 1,
            reset_at=int(math.ceil(oldest + window_seconds)),
            retry_after_seconds=None,
        )

    # A slot frees up once all but limit - 1 of the recorded attempts expire.
    blocking = timestamps[count - limit]
    retry_after = max(1, int(math.ceil(blocking + window_seconds - now)))
    return RateLimitResult(
        allowed=False,
        limit=limit,
        remaining=0,
        reset_at=int(math.ceil(timestamps[0] + window_seconds)),
        retry_after_seconds=retry_after,
    )
