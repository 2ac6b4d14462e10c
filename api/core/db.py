"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns one connection pool. The application constructs it once,
opens it in the FastAPI lifespan and closes it on shutdown (see
`api/main.py`). Every helper acquires a connection for the duration of a
single statement and releases it on every exit path.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

logger = logging.getLogger(__name__)

# Failures raised by the driver or the network while running a statement.
EXECUTION_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    # asyncpg command_timeout; not an OSError before Python 3.11.
    asyncio.TimeoutError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = config.DEFAULT_POOL_MIN,
        max_size: int = config.DEFAULT_POOL_MAX,
        max_inactive_connection_lifetime: float = config.DEFAULT_POOL_IDLE_TIMEOUT,
        command_timeout: float = config.DEFAULT_COMMAND_TIMEOUT,
        close_timeout: float = config.DEFAULT_CLOSE_TIMEOUT,
    ) -> None:
        if min_size < 1 or max_size < min_size:
            raise ValueError(f"Invalid pool bounds: min_size={min_size} max_size={max_size}")
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.max_inactive_connection_lifetime = max_inactive_connection_lifetime
        self.command_timeout = command_timeout
        self.close_timeout = close_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_env(cls) -> Database:
        settings = config.pool_settings()
        return cls(
            database_url(),
            min_size=settings.min_size,
            max_size=settings.max_size,
            max_inactive_connection_lifetime=settings.idle_timeout,
            command_timeout=settings.command_timeout,
            close_timeout=settings.close_timeout,
        )

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            max_inactive_connection_lifetime=self.max_inactive_connection_lifetime,
            command_timeout=self.command_timeout,
        )
        logger.info("db_pool_opened min_size=%s max_size=%s", self.min_size, self.max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        pool, self._pool = self._pool, None
        try:
            # Let in-flight statements finish before forcing connections shut.
            await asyncio.wait_for(pool.close(), timeout=self.close_timeout)
            logger.info("db_pool_closed")
        except asyncio.TimeoutError:
            logger.warning("db_pool_close_timeout grace_s=%s; terminating", self.close_timeout)
            pool.terminate()

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call Database.open() on startup.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Scoped acquisition: waits for a free connection when the pool is
        exhausted and always hands it back, whatever happens inside the block.
        """
        async with self.pool().acquire() as conn:
            yield conn

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        """
        Run a query and return the first column of the first row.
        """
        async with self.connection() as conn:
            return await conn.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return the driver's
        status tag, e.g. "INSERT 0 1" or "UPDATE 3".
        """
        async with self.connection() as conn:
            return await conn.execute(sql, *args)

    async def ping(self) -> bool:
        try:
            async with self.connection() as conn:
                await conn.fetchval("SELECT 1")
        except (*EXECUTION_ERRORS, RuntimeError):
            logger.warning("db_ping_failed", exc_info=True)
            return False
        return True
