"""Author directory interface.

The identity service owns user records; this service only reads them on
demand and never stores or caches them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator

from emojifeed.domain.models import AuthorRecord


class AbstractAuthorDirectory(ABC):
    """Read-only access to the external identity service."""

    @abstractmethod
    async def resolve_many(self, author_ids: Iterable[str]) -> dict[str, AuthorRecord]:
        """Resolve author ids to display records.

        Ids unknown to the identity service are absent from the result.
        """
        raise NotImplementedError

    @abstractmethod
    async def resolve_by_username(self, username: str) -> AuthorRecord | None:
        """Look up one author by username, or None when nobody has it."""
        raise NotImplementedError

    @abstractmethod
    async def verify_session(self, token: str) -> str | None:
        """Return the identity owning a sign-in session token, or None."""
        raise NotImplementedError

    async def start(self) -> None:
        """Open backend resources. No-op by default."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""


def unique_ids(author_ids: Iterable[str]) -> list[str]:
    """Deduplicate ids, keeping first-seen order and dropping empty ones."""
    return list(dict.fromkeys(author_id for author_id in author_ids if author_id))


def batched(items: list[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive chunks of at most ``size`` items."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]
