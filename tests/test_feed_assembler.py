"""Tests for joining posts with their authors."""

import asyncio
from datetime import datetime, timezone

import pytest

from emojifeed.adapters.directory.in_memory import InMemoryAuthorDirectory
from emojifeed.core.errors import InternalAppError, UpstreamTimeoutAppError
from emojifeed.domain.models import AuthorRecord, FeedEntry, Post
from emojifeed.services.feed_assembler import FeedAssembler

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _post(post_id: str, author_id: str) -> Post:
    return Post(id=post_id, author_id=author_id, content="🎉", created_at=CREATED)


@pytest.mark.asyncio
async def test_preserves_input_order(directory: InMemoryAuthorDirectory) -> None:
    posts = [_post("p3", "U2"), _post("p2", "U1"), _post("p1", "U2")]

    entries = await FeedAssembler(directory).assemble(posts)

    assert [e.post.id for e in entries] == ["p3", "p2", "p1"]
    assert [e.author.display_name for e in entries] == ["bob", "alice", "bob"]


@pytest.mark.asyncio
async def test_resolves_each_author_once(directory: InMemoryAuthorDirectory) -> None:
    posts = [_post(f"p{i}", "U1" if i % 2 else "U2") for i in range(10)]

    await FeedAssembler(directory).assemble(posts)

    assert len(directory.lookups) == 1
    assert sorted(directory.lookups[0]) == ["U1", "U2"]


@pytest.mark.asyncio
async def test_empty_input_skips_lookup(directory: InMemoryAuthorDirectory) -> None:
    assert await FeedAssembler(directory).assemble([]) == []
    assert directory.lookups == []


@pytest.mark.asyncio
async def test_unknown_author_fails_whole_batch(directory: InMemoryAuthorDirectory) -> None:
    posts = [_post("p1", "U1"), _post("p2", "ghost")]

    with pytest.raises(InternalAppError) as exc_info:
        await FeedAssembler(directory).assemble(posts)

    assert exc_info.value.code == "author_not_found"
    assert exc_info.value.message == "Author not found"
    assert exc_info.value.details == {"post_id": "p2"}


@pytest.mark.asyncio
async def test_author_without_display_name_fails(directory: InMemoryAuthorDirectory) -> None:
    with pytest.raises(InternalAppError):
        await FeedAssembler(directory).assemble([_post("p1", "U3")])


@pytest.mark.asyncio
async def test_slow_directory_times_out() -> None:
    class SlowDirectory(InMemoryAuthorDirectory):
        async def resolve_many(self, author_ids):
            await asyncio.sleep(1)
            return await super().resolve_many(author_ids)

    assembler = FeedAssembler(SlowDirectory(), timeout_seconds=0.01)

    with pytest.raises(UpstreamTimeoutAppError) as exc_info:
        await assembler.assemble([_post("p1", "U1")])

    assert exc_info.value.details["upstream"] == "identity"


def test_feed_entry_requires_matching_author() -> None:
    with pytest.raises(ValueError):
        FeedEntry(post=_post("p1", "U1"), author=AuthorRecord(id="U2", display_name="bob"))


def test_feed_entry_requires_display_name() -> None:
    with pytest.raises(ValueError):
        FeedEntry(post=_post("p1", "U1"), author=AuthorRecord(id="U1", display_name=""))
