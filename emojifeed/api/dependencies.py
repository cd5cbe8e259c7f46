"""Service container and FastAPI dependencies.

Backends are constructed explicitly from settings (or injected by tests) and
attached to ``app.state.container``; nothing is a module-level global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from emojifeed.adapters.directory.base import AbstractAuthorDirectory
from emojifeed.adapters.directory.http_client import HttpAuthorDirectory
from emojifeed.adapters.directory.in_memory import InMemoryAuthorDirectory
from emojifeed.adapters.rate_limit.base import AbstractRateLimiter
from emojifeed.adapters.storage.base import AbstractPostStore
from emojifeed.adapters.storage.in_memory import InMemoryPostStore
from emojifeed.adapters.storage.postgres import PostgresPostStore
from emojifeed.core.config import Settings
from emojifeed.core.errors import ValidationAppError
from emojifeed.core.rate_limit import PostRateLimitPolicy, build_rate_limiter
from emojifeed.services.feed_assembler import FeedAssembler
from emojifeed.services.post_service import PostService
from emojifeed.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Backends and the services built on top of them."""

    store: AbstractPostStore
    directory: AbstractAuthorDirectory
    limiter: AbstractRateLimiter
    post_service: PostService
    identity_timeout_seconds: float = 5.0
    rate_limit_include_headers: bool = True
    request_id_header: str = "X-Request-ID"
    profile_service: Optional[ProfileService] = None

    def __post_init__(self) -> None:
        if self.profile_service is None:
            self.profile_service = ProfileService(
                self.directory, timeout_seconds=self.identity_timeout_seconds
            )

    async def start(self) -> None:
        await self.store.start()
        await self.directory.start()
        logger.info(
            "container.started",
            extra={
                "store": type(self.store).__name__,
                "directory": type(self.directory).__name__,
                "limiter": type(self.limiter).__name__,
            },
        )

    async def close(self) -> None:
        await self.directory.close()
        await self.store.close()
        await self.limiter.close()


def _build_store(settings: Settings) -> AbstractPostStore:
    if settings.storage.backend == "postgres":
        if not settings.storage.dsn:
            raise ValidationAppError(
                code="storage_missing_dsn",
                message="Postgres storage requires STORAGE_DSN",
            )
        return PostgresPostStore(
            settings.storage.dsn,
            min_size=settings.storage.pool_min_size,
            max_size=settings.storage.pool_max_size,
            create_schema=settings.storage.create_schema,
        )
    return InMemoryPostStore()


def _build_directory(settings: Settings) -> AbstractAuthorDirectory:
    if settings.identity.backend == "http":
        if not settings.identity.base_url:
            raise ValidationAppError(
                code="identity_missing_base_url",
                message="HTTP identity backend requires IDENTITY_BASE_URL",
            )
        return HttpAuthorDirectory(
            settings.identity.base_url,
            api_key=settings.identity.api_key,
            batch_size=settings.identity.batch_size,
            timeout_seconds=settings.identity.timeout_seconds,
        )
    return InMemoryAuthorDirectory(batch_size=settings.identity.batch_size)


def build_container(
    settings: Settings,
    *,
    store: AbstractPostStore | None = None,
    directory: AbstractAuthorDirectory | None = None,
    limiter: AbstractRateLimiter | None = None,
) -> ServiceContainer:
    """Wire backends and services from settings.

    Any backend passed explicitly replaces the configured one.

    Raises:
        ValidationAppError: If a configured backend lacks required settings.
    """
    store = store or _build_store(settings)
    directory = directory or _build_directory(settings)
    limiter = limiter or build_rate_limiter(settings.app)

    post_service = PostService(
        store=store,
        assembler=FeedAssembler(directory, timeout_seconds=settings.identity.timeout_seconds),
        rate_limit=PostRateLimitPolicy(
            limiter,
            fail_open=settings.app.rate_limit_fail_open,
            timeout_seconds=settings.app.rate_limit_timeout_seconds,
        ),
        feed_limit=settings.app.feed_limit,
        max_content_chars=settings.app.max_content_chars,
        empty_author_feed_not_found=settings.app.empty_author_feed_not_found,
        storage_timeout_seconds=settings.storage.timeout_seconds,
    )
    return ServiceContainer(
        store=store,
        directory=directory,
        limiter=limiter,
        post_service=post_service,
        identity_timeout_seconds=settings.identity.timeout_seconds,
        rate_limit_include_headers=settings.app.rate_limit_include_headers,
        request_id_header=settings.log.request_id_header,
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_post_service(request: Request) -> PostService:
    return get_container(request).post_service


def get_profile_service(request: Request) -> ProfileService:
    return get_container(request).profile_service
