"""
Pytest configuration for the hike tracker API.

Provides:
- an in-process fake `Database` for unit tests (records every statement)
- a live `Database` for integration tests, skipped when PostgreSQL at
  DATABASE_URL is not reachable
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import asyncpg
import pytest
import pytest_asyncio

from core.db import Database, _sanitize_database_url
from tables.registry import REGISTRY

INIT_SQL_PATH = Path(__file__).parent.parent / "db" / "init.sql"


class FakeDatabase:
    """
    Stand-in for `core.db.Database` with programmable results.

    Set `error` to make the next statements raise it, as the driver would.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.rows: list[dict[str, Any]] = []
        self.value: Any = 0
        self.status = "INSERT 0 1"
        self.error: BaseException | None = None
        self.reachable = True
        self.opened = False
        self.closed = False

    def _record(self, method: str, sql: str, args: tuple[Any, ...]) -> None:
        self.calls.append((method, sql, args))
        if self.error is not None:
            raise self.error

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self._record("fetch_all", sql, args)
        return [dict(row) for row in self.rows]

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        self._record("fetch_value", sql, args)
        return self.value

    async def execute(self, sql: str, *args: Any) -> str:
        self._record("execute", sql, args)
        return self.status

    async def ping(self) -> bool:
        return self.reachable


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest_asyncio.fixture
async def live_db() -> AsyncGenerator[Database, None]:
    """
    Function-scoped pool against freshly recreated tables.
    """
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        pytest.skip("DATABASE_URL not set; skipping integration tests")

    database = Database(_sanitize_database_url(url), min_size=1, max_size=3, close_timeout=5)
    try:
        await database.open()
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError):
        pytest.skip("Database not available for integration tests")

    table_list = ", ".join(schema.name for schema in REGISTRY)
    async with database.connection() as conn:
        await conn.execute(f"DROP TABLE IF EXISTS {table_list} CASCADE")
        await conn.execute(INIT_SQL_PATH.read_text())

    try:
        yield database
    finally:
        await database.close()
