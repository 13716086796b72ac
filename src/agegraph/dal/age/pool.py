"""Connection pool for PostgreSQL with the Apache AGE extension.

The pool is created once at startup, handed to the repository and closed at
shutdown. Nothing here is module-level state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import Any, AsyncIterator, List, Optional

import asyncpg

from agegraph.common.config import GraphSettings
from agegraph.common.errors import GraphConnectionError
from agegraph.dal.error_classification import translate_driver_error

logger = logging.getLogger(__name__)

SEARCH_PATH_SQL = "SET search_path = ag_catalog, \"$user\", public;"
LOAD_AGE_SQL = "LOAD 'age';"


async def init_age_connection(conn: Any, load_extension: bool = True) -> None:
    """Prepare a fresh connection for Cypher statements.

    Loads AGE, puts ``ag_catalog`` on the search path and registers a text
    codec so ``agtype`` parameters can be bound as plain strings.
    """
    if load_extension:
        await conn.execute(LOAD_AGE_SQL)
    await conn.execute(SEARCH_PATH_SQL)
    await conn.set_type_codec(
        "agtype",
        schema="ag_catalog",
        encoder=str,
        decoder=str,
        format="text",
    )


class AgeConnection:
    """A checked-out asyncpg connection exposing the single-column fetch primitive."""

    def __init__(self, conn: Any) -> None:
        """Wrap a raw asyncpg connection."""
        self._conn = conn

    async def fetch_column(self, sql: str, *params: Any) -> List[str]:
        """Execute ``sql`` and return the first column of every row."""
        rows = await self._conn.fetch(sql, *params)
        return [row[0] for row in rows]


class AgeConnectionPool:
    """Owns an asyncpg pool and hands out `AgeConnection` scopes."""

    def __init__(self, pool: Any, acquire_timeout_seconds: Optional[float] = None) -> None:
        """Wrap an existing asyncpg pool (use `create` to build one from settings)."""
        self._pool = pool
        self._acquire_timeout = acquire_timeout_seconds
        self._closed = False

    @classmethod
    async def create(cls, settings: GraphSettings) -> "AgeConnectionPool":
        """Open a pool using the given settings."""
        try:
            pool = await asyncpg.create_pool(
                host=settings.host,
                port=settings.port,
                user=settings.user,
                password=settings.password,
                database=settings.database,
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                command_timeout=settings.command_timeout_seconds,
                init=partial(init_age_connection, load_extension=settings.load_extension),
                server_settings={"application_name": "agegraph"},
            )
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise translate_driver_error(exc, "connect") from exc

        logger.info(
            "AGE connection pool established: %s (graph=%s)", settings.dsn, settings.graph_name
        )
        return cls(pool, acquire_timeout_seconds=settings.acquire_timeout_seconds)

    @property
    def closed(self) -> bool:
        """Return True once `close` has run."""
        return self._closed

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AgeConnection]:
        """Check out a connection with a bounded wait; always release it."""
        if self._closed:
            raise GraphConnectionError("Connection pool is closed.")
        try:
            conn = await self._pool.acquire(timeout=self._acquire_timeout)
        except asyncio.TimeoutError as exc:
            raise GraphConnectionError(
                "Connection pool exhausted.",
                detail=f"No connection became free within {self._acquire_timeout}s.",
            ) from exc
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise translate_driver_error(exc, "acquire") from exc

        try:
            yield AgeConnection(conn)
        finally:
            await self._pool.release(conn)

    async def close(self) -> None:
        """Close every pooled connection."""
        if self._closed:
            return
        self._closed = True
        await self._pool.close()
        logger.info("AGE connection pool closed")

    async def __aenter__(self) -> "AgeConnectionPool":
        """Support ``async with`` ownership."""
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        """Close the pool on scope exit."""
        await self.close()
