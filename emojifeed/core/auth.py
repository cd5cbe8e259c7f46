"""Session authentication for mutations.

The identity service issues sign-in sessions; callers present the session
token as ``Authorization: Bearer <token>`` and the identity service turns it
into a stable identity. Read operations are public and do not use this.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header

from emojifeed.api.dependencies import ServiceContainer, get_container
from emojifeed.core.errors import AuthenticationAppError
from emojifeed.core.logging import hash_identity
from emojifeed.core.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an Authorization header value.

    Examples:
        >>> parse_bearer_token("Bearer abc")
        'abc'
        >>> parse_bearer_token("bearer  abc ")
        'abc'
        >>> parse_bearer_token("Basic abc") is None
        True
        >>> parse_bearer_token(None) is None
        True
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def get_current_identity(
    container: Annotated[ServiceContainer, Depends(get_container)],
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """FastAPI dependency resolving the signed-in identity.

    Raises:
        AuthenticationAppError: If the header is missing/malformed or the
            identity service does not recognise the session.
    """
    token = parse_bearer_token(authorization)
    if token is None:
        logger.warning("auth.missing_session", extra={"header_present": authorization is not None})
        raise AuthenticationAppError(
            code="unauthorized",
            message="You must be signed in to do that",
            details={"hint": "Send the session token as 'Authorization: Bearer <token>'"},
        )

    identity = await call_with_timeout(
        container.directory.verify_session(token),
        timeout_seconds=container.identity_timeout_seconds,
        upstream="identity",
    )
    if not identity:
        logger.warning("auth.invalid_session")
        raise AuthenticationAppError(
            code="unauthorized",
            message="Your session is invalid or has expired",
        )

    logger.debug("auth.success", extra={"identity_hash": hash_identity(identity)})
    return identity
