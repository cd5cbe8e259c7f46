"""Post rate limiting policy.

This module wires the rate limiting adapter into the service layer:
- builds the configured limiter backend
- applies the backend-failure policy (fail-closed unless configured otherwise)
- turns a refusal into a RateLimitedAppError with retry metadata

Rate limiting strategy: sliding window per author identity, applied to post
creation only. No identity bypasses it.
"""

from __future__ import annotations

import logging

from emojifeed.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from emojifeed.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from emojifeed.adapters.rate_limit.redis_backend import RedisSlidingWindowRateLimiter
from emojifeed.core.config import AppSettings
from emojifeed.core.errors import RateLimitedAppError, UpstreamUnavailableAppError
from emojifeed.core.logging import hash_identity
from emojifeed.core.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Create the limiter backend selected by configuration.

    Args:
        app_settings: Application settings with rate_limit_* fields.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """
    if app_settings.rate_limit_backend == "redis":
        return RedisSlidingWindowRateLimiter.from_url(
            app_settings.redis_url,
            limit=app_settings.rate_limit_requests,
            window_seconds=app_settings.rate_limit_window_seconds,
        )

    return InMemorySlidingWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


class PostRateLimitPolicy:
    """Applies the rate limiter to post creation attempts."""

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        *,
        fail_open: bool = False,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._limiter = limiter
        self._fail_open = fail_open
        self._timeout_seconds = timeout_seconds

    @property
    def limiter(self) -> AbstractRateLimiter:
        return self._limiter

    async def enforce(self, identity: str) -> RateLimitResult | None:
        """Check a write attempt for ``identity`` and refuse it over quota.

        Args:
            identity: Author identity attempting the write.

        Returns:
            The limiter decision, or None when the backend was unreachable
            and the policy is fail-open.

        Raises:
            RateLimitedAppError: When the identity is over quota.
            UpstreamUnavailableAppError: When the backend is unreachable and
                the policy is fail-closed.
        """
        identity_hash = hash_identity(identity)

        try:
            result = await call_with_timeout(
                self._limiter.allow(identity),
                timeout_seconds=self._timeout_seconds,
                upstream="rate_limit",
            )
        except UpstreamUnavailableAppError as exc:
            logger.error(
                "rate_limit.backend_unavailable",
                extra={
                    "identity_hash": identity_hash,
                    "error_code": exc.code,
                    "fail_open": self._fail_open,
                },
            )
            if self._fail_open:
                return None
            raise

        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "identity_hash": identity_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return result

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "identity_hash": identity_hash,
                "limit": result.limit,
                "retry_after_s": retry_after,
            },
        )
        raise RateLimitedAppError(
            code="too_many_requests",
            message="You are posting too fast",
            details={
                "limit": result.limit,
                "retry_after": retry_after,
                "reset_at": result.reset_at,
            },
        )
