"""
Environment-driven settings.

Everything here reads `os.environ` at call time, so tests can monkeypatch
variables without reloading modules.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_POOL_MIN = 1
DEFAULT_POOL_MAX = 3
DEFAULT_POOL_IDLE_TIMEOUT = 60.0
DEFAULT_COMMAND_TIMEOUT = 30.0
DEFAULT_CLOSE_TIMEOUT = 10.0

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class PoolSettings:
    min_size: int = DEFAULT_POOL_MIN
    max_size: int = DEFAULT_POOL_MAX
    idle_timeout: float = DEFAULT_POOL_IDLE_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    close_timeout: float = DEFAULT_CLOSE_TIMEOUT


def pool_settings() -> PoolSettings:
    min_size = max(1, env_int("DB_POOL_MIN", DEFAULT_POOL_MIN))
    max_size = max(min_size, env_int("DB_POOL_MAX", DEFAULT_POOL_MAX))
    return PoolSettings(
        min_size=min_size,
        max_size=max_size,
        idle_timeout=env_float("DB_POOL_IDLE_TIMEOUT", DEFAULT_POOL_IDLE_TIMEOUT),
        command_timeout=env_float("DB_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT),
        close_timeout=env_float("DB_CLOSE_TIMEOUT", DEFAULT_CLOSE_TIMEOUT),
    )


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def configure_logging() -> None:
    logging.basicConfig(
        level=log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
