"""Public profile lookup by username."""

from __future__ import annotations

import logging

from emojifeed.adapters.directory.base import AbstractAuthorDirectory
from emojifeed.core.errors import NotFoundAppError
from emojifeed.core.timeouts import call_with_timeout
from emojifeed.domain.models import AuthorRecord

logger = logging.getLogger(__name__)


class ProfileService:
    """Resolves profile pages (``/@username``) to author records."""

    def __init__(self, directory: AbstractAuthorDirectory, *, timeout_seconds: float = 5.0) -> None:
        self._directory = directory
        self._timeout_seconds = timeout_seconds

    async def get_by_username(self, username: str) -> AuthorRecord:
        """Return the author whose username is ``username``.

        A leading ``@`` (as in profile URLs) is ignored.

        Raises:
            NotFoundAppError: If nobody has the username, or the matching
                author has no display name.
        """
        name = username.strip().removeprefix("@")
        author = None
        if name:
            author = await call_with_timeout(
                self._directory.resolve_by_username(name),
                timeout_seconds=self._timeout_seconds,
                upstream="identity",
            )

        if author is None or not author.display_name:
            logger.info("profile.not_found", extra={"has_record": author is not None})
            raise NotFoundAppError(
                code="profile_not_found",
                message="User not found",
                details={"username": name},
            )
        return author
