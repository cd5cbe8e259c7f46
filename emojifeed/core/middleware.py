"""HTTP middleware for request ID propagation and correlation.

The middleware accepts an incoming request-id header (configurable via
LOG_REQUEST_ID_HEADER) or generates a UUID, stores it in contextvars for log
correlation, and echoes it back together with the request duration.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from emojifeed.core.config import settings
from emojifeed.core.logging import reset_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request/response pair with a correlation id.

    Side Effects:
        - Sets request_id in contextvars for the lifetime of the request
        - Adds the request-id header and X-Request-Duration-ms to the response
    """

    container = getattr(request.app.state, "container", None)
    header_name = getattr(container, "request_id_header", None) or settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    token = set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        reset_request_id(token)

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
