"""Maps application errors to HTTP responses.

Every error body has the shape ``{"error": {code, message, request_id,
details?}}``. Client errors (4xx) keep their message and details; server-side
faults (5xx) keep their code but get a generic message, so internal state
never reaches the client.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from emojifeed.core.errors import (
    AppError,
    AuthenticationAppError,
    InternalAppError,
    NotFoundAppError,
    RateLimitedAppError,
    UpstreamTimeoutAppError,
    UpstreamUnavailableAppError,
    ValidationAppError,
)
from emojifeed.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Most specific first: UpstreamTimeoutAppError subclasses UpstreamUnavailableAppError.
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (AuthenticationAppError, 401),
    (NotFoundAppError, 404),
    (RateLimitedAppError, 429),
    (InternalAppError, 500),
    (UpstreamTimeoutAppError, 504),
    (UpstreamUnavailableAppError, 503),
)

# Server-side faults get a generic message; the code still tells them apart.
_GENERIC_MESSAGE = "An unexpected error occurred. Please try again later."


def status_code_for(exc: AppError) -> int:
    """Map an AppError to its HTTP status code (400 when unmapped)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _rate_limit_headers(request: Request, exc: RateLimitedAppError) -> dict[str, str]:
    # Apps without a service container keep the headers on.
    container = getattr(request.app.state, "container", None)
    include_headers = getattr(container, "rate_limit_include_headers", True)
    if not include_headers or not exc.details:
        return {}

    headers: dict[str, str] = {}
    if "retry_after" in exc.details:
        headers["Retry-After"] = str(exc.details["retry_after"])
    if "limit" in exc.details:
        headers["X-RateLimit-Limit"] = str(exc.details["limit"])
        headers["X-RateLimit-Remaining"] = "0"
    if "reset_at" in exc.details:
        headers["X-RateLimit-Reset"] = str(exc.details["reset_at"])
    return headers


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with the status from ``status_code_for``."""
    status_code = status_code_for(exc)
    server_fault = status_code >= 500

    log = logger.error if server_fault else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content: dict = {
        "code": exc.code,
        "message": _GENERIC_MESSAGE if server_fault else exc.message,
        "request_id": get_request_id(),
    }
    if exc.details and not server_fault:
        error_content["details"] = exc.details

    headers = _rate_limit_headers(request, exc) if isinstance(exc, RateLimitedAppError) else None

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI body/query validation failures as field-level errors."""
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields.setdefault(".".join(loc) or "request", []).append(error.get("msg", "Invalid value"))

    logger.warning(
        "request_validation_failed",
        extra={"request_path": request.url.path, "fields": sorted(fields)},
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "invalid_request",
                "message": "Request validation failed",
                "request_id": get_request_id(),
                "details": {"fields": fields},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 for exceptions that are not AppErrors.

    The traceback is logged; the response carries only the request id.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": _GENERIC_MESSAGE,
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
