"""In-memory author directory for tests and local development."""

from __future__ import annotations

from typing import Iterable

from emojifeed.adapters.directory.base import AbstractAuthorDirectory, batched, unique_ids
from emojifeed.domain.models import AuthorRecord


class InMemoryAuthorDirectory(AbstractAuthorDirectory):
    """Directory seeded with author records and session tokens.

    Attributes:
        lookups: Batches of ids requested so far, for assertions in tests.
    """

    def __init__(
        self,
        authors: Iterable[AuthorRecord] = (),
        sessions: dict[str, str] | None = None,
        *,
        batch_size: int = 100,
    ) -> None:
        self._authors = {author.id: author for author in authors}
        self._sessions = dict(sessions or {})
        self._batch_size = batch_size
        self.lookups: list[list[str]] = []

    def add_author(self, author: AuthorRecord) -> None:
        self._authors[author.id] = author

    def add_session(self, token: str, identity: str) -> None:
        self._sessions[token] = identity

    async def resolve_many(self, author_ids: Iterable[str]) -> dict[str, AuthorRecord]:
        resolved: dict[str, AuthorRecord] = {}
        for batch in batched(unique_ids(author_ids), self._batch_size):
            self.lookups.append(batch)
            for author_id in batch:
                author = self._authors.get(author_id)
                if author is not None:
                    resolved[author_id] = author
        return resolved

    async def resolve_by_username(self, username: str) -> AuthorRecord | None:
        for author in self._authors.values():
            if author.display_name == username:
                return author
        return None

    async def verify_session(self, token: str) -> str | None:
        return self._sessions.get(token)
