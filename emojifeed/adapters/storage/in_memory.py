"""In-memory post store for tests and single-process development."""

from __future__ import annotations

import itertools
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable

from emojifeed.adapters.storage.base import DEFAULT_LIMIT, AbstractPostStore
from emojifeed.domain.models import Post


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPostStore(AbstractPostStore):
    """Thread-safe post store backed by a dict.

    A monotonically increasing sequence number records insertion order so
    posts sharing a timestamp sort deterministically.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._posts: dict[str, tuple[int, Post]] = {}
        self._seq = itertools.count()

    async def insert(self, author_id: str, content: str) -> Post:
        with self._lock:
            post = Post(
                id=self._id_factory(),
                author_id=author_id,
                content=content,
                created_at=self._clock(),
            )
            if post.id in self._posts:
                raise ValueError(f"duplicate post id {post.id!r}")
            self._posts[post.id] = (next(self._seq), post)
            return post

    def _ordered(self, rows: Iterable[tuple[int, Post]], limit: int) -> list[Post]:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        ordered = sorted(rows, key=lambda row: (-row[1].created_at.timestamp(), row[0]))
        return [post for _, post in ordered[:limit]]

    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> list[Post]:
        with self._lock:
            return self._ordered(list(self._posts.values()), limit)

    async def get_by_id(self, post_id: str) -> Post | None:
        with self._lock:
            row = self._posts.get(post_id)
            return row[1] if row else None

    async def list_by_author(self, author_id: str, limit: int = DEFAULT_LIMIT) -> list[Post]:
        with self._lock:
            rows = [row for row in self._posts.values() if row[1].author_id == author_id]
            return self._ordered(rows, limit)
