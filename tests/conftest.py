"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that might load settings so
the in-memory backends are selected and no .env file is needed.
"""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("IDENTITY_BACKEND", "memory")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from emojifeed.adapters.directory.in_memory import InMemoryAuthorDirectory
from emojifeed.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from emojifeed.adapters.storage.in_memory import InMemoryPostStore
from emojifeed.core.rate_limit import PostRateLimitPolicy
from emojifeed.domain.models import AuthorRecord
from emojifeed.services.feed_assembler import FeedAssembler
from emojifeed.services.post_service import PostService


class FakeDateTimeClock:
    """Deterministic UTC clock for the post store."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def authors() -> list[AuthorRecord]:
    return [
        AuthorRecord(id="U1", display_name="alice", profile_image_url="https://img.example/alice.png"),
        AuthorRecord(id="U2", display_name="bob", profile_image_url="https://img.example/bob.png"),
        AuthorRecord(id="U3", display_name=None, profile_image_url=None),
    ]


@pytest.fixture
def directory(authors: list[AuthorRecord]) -> InMemoryAuthorDirectory:
    return InMemoryAuthorDirectory(
        authors,
        sessions={"session-u1": "U1", "session-u2": "U2", "session-u3": "U3"},
    )


@pytest.fixture
def post_clock() -> FakeDateTimeClock:
    return FakeDateTimeClock()


@pytest.fixture
def store(post_clock: FakeDateTimeClock) -> InMemoryPostStore:
    return InMemoryPostStore(clock=post_clock)


@pytest.fixture
def limiter_clock() -> Mock:
    return Mock(return_value=1000.0)


@pytest.fixture
def limiter(limiter_clock: Mock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=limiter_clock)


@pytest.fixture
def post_service(
    store: InMemoryPostStore,
    directory: InMemoryAuthorDirectory,
    limiter: InMemorySlidingWindowRateLimiter,
) -> PostService:
    return PostService(
        store=store,
        assembler=FeedAssembler(directory),
        rate_limit=PostRateLimitPolicy(limiter),
    )
