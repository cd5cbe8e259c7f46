"""PostgreSQL post store using an asyncpg connection pool."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

import asyncpg

from emojifeed.adapters.storage.base import DEFAULT_LIMIT, AbstractPostStore
from emojifeed.core.errors import UpstreamUnavailableAppError
from emojifeed.domain.models import Post

logger = logging.getLogger(__name__)

# Bootstrap only; schema evolution is handled outside this service.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    seq BIGSERIAL NOT NULL,
    author_id TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS posts_created_at_idx ON posts (created_at DESC, seq ASC);
CREATE INDEX IF NOT EXISTS posts_author_created_at_idx ON posts (author_id, created_at DESC, seq ASC);
"""

_COLUMNS = "id, author_id, content, created_at"


class PostgresPostStore(AbstractPostStore):
    """Post store backed by the ``posts`` table."""

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        create_schema: bool = False,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._create_schema = create_schema
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self) -> None:
        """Create the connection pool (and the table when configured)."""
        try:
            self.pool = await asyncpg.create_pool(
                self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=60,
            )
            if self._create_schema:
                async with self.pool.acquire() as conn:
                    await conn.execute(SCHEMA_SQL)
        except (asyncpg.PostgresError, OSError) as exc:
            raise self._unavailable(exc) from exc
        logger.info(
            "storage.pool_created",
            extra={"min_size": self._min_size, "max_size": self._max_size},
        )

    async def close(self) -> None:
        if self.pool:
            await self.pool.close()
            logger.info("storage.pool_closed")

    def _unavailable(self, exc: Exception) -> UpstreamUnavailableAppError:
        logger.error(
            "storage.error",
            extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
        )
        return UpstreamUnavailableAppError(
            code="storage_unavailable",
            message="Post storage is unavailable.",
            details={"upstream": "storage"},
        )

    async def _fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        if self.pool is None:
            raise RuntimeError("PostgresPostStore.start() was not awaited")
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise self._unavailable(exc) from exc

    @staticmethod
    def _row_to_post(row: asyncpg.Record) -> Post:
        return Post(
            id=row["id"],
            author_id=row["author_id"],
            content=row["content"],
            created_at=row["created_at"],
        )

    async def insert(self, author_id: str, content: str) -> Post:
        rows = await self._fetch(
            f"""
            INSERT INTO posts (id, author_id, content)
            VALUES ($1, $2, $3)
            RETURNING {_COLUMNS}
            """,
            str(uuid.uuid4()),
            author_id,
            content,
        )
        return self._row_to_post(rows[0])

    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> list[Post]:
        rows = await self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM posts
            ORDER BY created_at DESC, seq ASC
            LIMIT $1
            """,
            limit,
        )
        return [self._row_to_post(row) for row in rows]

    async def get_by_id(self, post_id: str) -> Post | None:
        rows = await self._fetch(
            f"SELECT {_COLUMNS} FROM posts WHERE id = $1",
            post_id,
        )
        return self._row_to_post(rows[0]) if rows else None

    async def list_by_author(self, author_id: str, limit: int = DEFAULT_LIMIT) -> list[Post]:
        rows = await self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM posts
            WHERE author_id = $1
            ORDER BY created_at DESC, seq ASC
            LIMIT $2
            """,
            author_id,
            limit,
        )
        return [self._row_to_post(row) for row in rows]
