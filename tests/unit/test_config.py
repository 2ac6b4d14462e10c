from __future__ import annotations

import pytest

from core import config
from core.db import Database, _sanitize_database_url, database_url


def test_pool_settings_defaults(monkeypatch) -> None:
    for name in ("DB_POOL_MIN", "DB_POOL_MAX", "DB_POOL_IDLE_TIMEOUT", "DB_COMMAND_TIMEOUT", "DB_CLOSE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    settings = config.pool_settings()

    assert settings == config.PoolSettings(
        min_size=1,
        max_size=3,
        idle_timeout=60.0,
        command_timeout=30.0,
        close_timeout=10.0,
    )


def test_pool_settings_ignore_garbage_and_keep_bounds_consistent(monkeypatch) -> None:
    monkeypatch.setenv("DB_POOL_MIN", "4")
    monkeypatch.setenv("DB_POOL_MAX", "2")
    monkeypatch.setenv("DB_COMMAND_TIMEOUT", "soon")

    settings = config.pool_settings()

    assert settings.min_size == 4
    assert settings.max_size == 4
    assert settings.command_timeout == config.DEFAULT_COMMAND_TIMEOUT


def test_cors_origins_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example ,")

    assert config.cors_origins() == ["https://a.example", "https://b.example"]


def test_cors_origins_default(monkeypatch) -> None:
    monkeypatch.delenv("CORS_ORIGINS", raising=False)

    assert config.cors_origins() == list(config.DEFAULT_CORS_ORIGINS)


def test_database_url_strips_sslmode(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/hikes?sslmode=disable&application_name=api")

    assert database_url() == "postgresql://u:p@db:5432/hikes?application_name=api"
    assert _sanitize_database_url("postgresql://db/hikes") == "postgresql://db/hikes"


def test_database_url_required(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        database_url()


def test_database_from_env_uses_pool_settings(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/hikes")
    monkeypatch.setenv("DB_POOL_MAX", "5")

    database = Database.from_env()

    assert database.dsn == "postgresql://db/hikes"
    assert database.max_size == 5
    assert not database.is_open


def test_database_rejects_bad_pool_bounds() -> None:
    with pytest.raises(ValueError, match="pool bounds"):
        Database("postgresql://db/hikes", min_size=3, max_size=1)


@pytest.mark.asyncio
async def test_unopened_database_refuses_work() -> None:
    database = Database("postgresql://db/hikes")

    with pytest.raises(RuntimeError, match="not initialized"):
        await database.fetch_all("SELECT 1")
    assert await database.ping() is False
    # Closing a pool that was never opened is a no-op.
    await database.close()
