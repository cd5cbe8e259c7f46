"""Post operations exposed to the API layer.

Reads go Post Store -> Feed Assembler -> Author Directory; the create
mutation goes content validation -> rate limit -> Post Store. Errors propagate
to the HTTP boundary without local recovery.
"""

from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

from emojifeed.adapters.storage.base import DEFAULT_LIMIT, AbstractPostStore
from emojifeed.core.errors import NotFoundAppError
from emojifeed.core.logging import hash_identity
from emojifeed.core.rate_limit import PostRateLimitPolicy
from emojifeed.core.timeouts import call_with_timeout
from emojifeed.domain.models import FeedEntry, Post
from emojifeed.services.feed_assembler import FeedAssembler
from emojifeed.utils.content_validation import MAX_CONTENT_CHARS, validate_post_content

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostService:
    """List, fetch and create posts."""

    def __init__(
        self,
        *,
        store: AbstractPostStore,
        assembler: FeedAssembler,
        rate_limit: PostRateLimitPolicy,
        feed_limit: int = DEFAULT_LIMIT,
        max_content_chars: int = MAX_CONTENT_CHARS,
        empty_author_feed_not_found: bool = True,
        storage_timeout_seconds: float = 5.0,
    ) -> None:
        self._store = store
        self._assembler = assembler
        self._rate_limit = rate_limit
        self._feed_limit = feed_limit
        self._max_content_chars = max_content_chars
        self._empty_author_feed_not_found = empty_author_feed_not_found
        self._storage_timeout_seconds = storage_timeout_seconds

    async def _storage(self, awaitable: Awaitable[T]) -> T:
        return await call_with_timeout(
            awaitable,
            timeout_seconds=self._storage_timeout_seconds,
            upstream="storage",
        )

    async def list_all(self) -> list[FeedEntry]:
        """Most recent posts across all authors, newest first."""
        posts = await self._storage(self._store.list_recent(self._feed_limit))
        return await self._assembler.assemble(posts)

    async def get_by_id(self, post_id: str) -> FeedEntry:
        """A single post with its author.

        Raises:
            NotFoundAppError: If no post has ``post_id``.
        """
        post = await self._storage(self._store.get_by_id(post_id))
        if post is None:
            raise NotFoundAppError(
                code="post_not_found",
                message="Post not found",
                details={"post_id": post_id},
            )
        [entry] = await self._assembler.assemble([post])
        return entry

    async def list_by_author(self, author_id: str) -> list[FeedEntry]:
        """Most recent posts by one author, newest first.

        Raises:
            NotFoundAppError: If the author has no posts and the service is
                configured to treat that as not found.
        """
        posts = await self._storage(self._store.list_by_author(author_id, self._feed_limit))
        entries = await self._assembler.assemble(posts)
        if not entries and self._empty_author_feed_not_found:
            raise NotFoundAppError(
                code="author_feed_not_found",
                message="No posts found for this user",
                details={"author_id": author_id},
            )
        return entries

    async def create(self, identity: str, content: str) -> Post:
        """Validate, rate-limit and store a new post for ``identity``.

        Raises:
            ValidationAppError: If the content is empty, too long or not emoji-only.
            RateLimitedAppError: If the identity is posting too fast.
        """
        validate_post_content(content, max_chars=self._max_content_chars)
        await self._rate_limit.enforce(identity)

        post = await self._storage(self._store.insert(identity, content))
        logger.info(
            "post.created",
            extra={
                "post_id": post.id,
                "author_hash": hash_identity(identity),
                "char_count": len(content),
            },
        )
        return post
