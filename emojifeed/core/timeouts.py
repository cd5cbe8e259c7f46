"""Timeout protection for calls to external collaborators."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from emojifeed.core.errors import UpstreamTimeoutAppError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_timeout(
    awaitable: Awaitable[T],
    *,
    timeout_seconds: float,
    upstream: str,
) -> T:
    """Await an external call, converting a timeout into an application error.

    Args:
        awaitable: Coroutine performing the external call.
        timeout_seconds: Maximum time to wait.
        upstream: Name of the collaborator ("identity", "storage", "rate_limit").

    Returns:
        Whatever the awaitable returns.

    Raises:
        UpstreamTimeoutAppError: If the call does not finish in time.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "upstream.timeout",
            extra={"upstream": upstream, "timeout_seconds": timeout_seconds},
        )
        raise UpstreamTimeoutAppError(
            code="upstream_timeout",
            message=f"The {upstream} service did not respond in time.",
            details={"upstream": upstream, "timeout_seconds": timeout_seconds},
        ) from None
