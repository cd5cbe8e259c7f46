"""Domain models for posts, authors and feed entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Post:
    """A stored micro-post. Immutable once created."""

    id: str
    author_id: str
    content: str
    created_at: datetime


@dataclass(frozen=True)
class AuthorRecord:
    """Public display data for an author, owned by the identity service."""

    id: str
    display_name: str | None
    profile_image_url: str | None = None


@dataclass(frozen=True)
class FeedEntry:
    """A post joined with its author.

    Only constructible for an author that matches the post and has a
    non-empty display name.
    """

    post: Post
    author: AuthorRecord

    def __post_init__(self) -> None:
        if self.author.id != self.post.author_id:
            raise ValueError(
                f"author {self.author.id!r} does not match post author {self.post.author_id!r}"
            )
        if not self.author.display_name:
            raise ValueError(f"author {self.author.id!r} has no display name")
