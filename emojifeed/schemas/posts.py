"""Pydantic schemas for post endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from emojifeed.domain.models import AuthorRecord, FeedEntry, Post


class CreatePostRequest(BaseModel):
    """Body of the create mutation.

    Content rules are enforced by the service, not by this schema, so every
    rule violation comes back in the same field-level error format.
    """

    content: str = Field(..., description="Emoji-only text, 1-280 characters.")


class PostResponse(BaseModel):
    """A stored post."""

    id: str
    author_id: str
    content: str
    created_at: datetime

    @classmethod
    def from_domain(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            author_id=post.author_id,
            content=post.content,
            created_at=post.created_at,
        )


class AuthorResponse(BaseModel):
    """Public author data shown next to a post and on profile pages."""

    id: str
    name: str
    profile_image_url: str | None = None

    @classmethod
    def from_domain(cls, author: AuthorRecord) -> "AuthorResponse":
        return cls(
            id=author.id,
            # Callers only pass authors with a non-empty display name
            name=author.display_name or "",
            profile_image_url=author.profile_image_url,
        )


class FeedEntryResponse(BaseModel):
    """A post together with its author."""

    post: PostResponse
    author: AuthorResponse

    @classmethod
    def from_domain(cls, entry: FeedEntry) -> "FeedEntryResponse":
        return cls(
            post=PostResponse.from_domain(entry.post),
            author=AuthorResponse.from_domain(entry.author),
        )
