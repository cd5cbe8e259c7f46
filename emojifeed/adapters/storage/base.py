"""Post store interface.

Ordering contract shared by every backend: newest first by ``created_at``;
posts with equal timestamps keep insertion order (earlier insert first).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from emojifeed.domain.models import Post

DEFAULT_LIMIT = 100


class AbstractPostStore(ABC):
    """Durable, append-only storage of posts."""

    @abstractmethod
    async def insert(self, author_id: str, content: str) -> Post:
        """Store a new post, assigning its id and creation timestamp."""
        raise NotImplementedError

    @abstractmethod
    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> list[Post]:
        """Return up to ``limit`` posts, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, post_id: str) -> Post | None:
        """Return the post with ``post_id`` or None."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_author(self, author_id: str, limit: int = DEFAULT_LIMIT) -> list[Post]:
        """Return up to ``limit`` posts by ``author_id``, newest first."""
        raise NotImplementedError

    async def start(self) -> None:
        """Open backend resources. No-op by default."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
