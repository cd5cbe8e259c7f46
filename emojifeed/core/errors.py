"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep shapes consistent across the codebase without
    forcing every error to fill all of them.
    """

    hint: str
    fields: dict[str, list[str]]
    post_id: str
    author_id: str
    limit: int
    retry_after: int
    reset_at: int
    upstream: str
    timeout_seconds: float
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller has no valid sign-in session."""


class NotFoundAppError(AppError):
    """Raised when a post, author or author feed does not exist."""


class RateLimitedAppError(AppError):
    """Raised when an identity exceeds its write quota."""


class InternalAppError(AppError):
    """Raised on data-integrity faults, e.g. a post whose author is unknown."""


class UpstreamUnavailableAppError(AppError):
    """Raised when the identity service, storage or limiter backend fails."""


class UpstreamTimeoutAppError(UpstreamUnavailableAppError):
    """Raised when an external call exceeds its configured timeout."""
