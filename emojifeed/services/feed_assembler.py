"""Joins stored posts with author records from the identity service.

Every post must resolve to a known author with a display name. A single
missing author fails the whole batch; the assembler never returns a partial
feed.
"""

from __future__ import annotations

import logging
from typing import Sequence

from emojifeed.adapters.directory.base import AbstractAuthorDirectory
from emojifeed.core.errors import InternalAppError
from emojifeed.core.logging import hash_identity
from emojifeed.core.timeouts import call_with_timeout
from emojifeed.domain.models import FeedEntry, Post

logger = logging.getLogger(__name__)


class FeedAssembler:
    """Builds FeedEntries from posts, preserving input order."""

    def __init__(self, directory: AbstractAuthorDirectory, *, timeout_seconds: float = 5.0) -> None:
        self._directory = directory
        self._timeout_seconds = timeout_seconds

    async def assemble(self, posts: Sequence[Post]) -> list[FeedEntry]:
        """Attach each post's author.

        Args:
            posts: Posts in the order they should be returned.

        Returns:
            One FeedEntry per post, in input order.

        Raises:
            InternalAppError: If any post's author is unknown or has no
                display name.
        """
        if not posts:
            return []

        author_ids = {post.author_id for post in posts}
        authors = await call_with_timeout(
            self._directory.resolve_many(author_ids),
            timeout_seconds=self._timeout_seconds,
            upstream="identity",
        )

        entries: list[FeedEntry] = []
        for post in posts:
            author = authors.get(post.author_id)
            if author is None or not author.display_name:
                logger.error(
                    "feed.author_missing",
                    extra={
                        "post_id": post.id,
                        "author_hash": hash_identity(post.author_id),
                        "resolved": author is not None,
                    },
                )
                raise InternalAppError(
                    code="author_not_found",
                    message="Author not found",
                    details={"post_id": post.id},
                )
            entries.append(FeedEntry(post=post, author=author))

        return entries
