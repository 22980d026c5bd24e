"""Centralized database engine management.

One engine (and therefore one bounded connection pool) is created per
Lambda container and shared by every invocation it serves.
"""

from __future__ import annotations

import os
from typing import Any
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from accounts.db.connection import get_database_url

_ENGINE_CACHE: dict[str, Engine] = {}


def get_engine(use_cache: bool = True, database_url: Optional[str] = None) -> Engine:
    """Get or create the SQLAlchemy engine.

    Args:
        use_cache: Whether to reuse the container-wide engine.
        database_url: Override the resolved database URL.

    Returns:
        A configured SQLAlchemy engine.
    """
    cache_key = "default"
    if use_cache and cache_key in _ENGINE_CACHE:
        return _ENGINE_CACHE[cache_key]

    url = database_url or get_database_url()
    engine = create_engine(
        url,
        pool_pre_ping=True,
        connect_args=_get_connect_args(url),
        **_get_pool_settings(),
    )

    if use_cache:
        _ENGINE_CACHE[cache_key] = engine
    return engine


def clear_engine_cache() -> None:
    """Dispose and forget the cached engine."""
    for engine in _ENGINE_CACHE.values():
        engine.dispose()
    _ENGINE_CACHE.clear()


def _get_connect_args(url: str) -> dict[str, str]:
    """Return driver connection arguments (PostgreSQL only)."""
    if not url.startswith("postgresql"):
        return {}
    return {"sslmode": os.getenv("DATABASE_SSLMODE", "require")}


def _get_pool_settings() -> dict[str, Any]:
    """Return bounded pool settings.

    pool_size is the steady number of connections; max_overflow caps the
    extra connections opened under bursts, and pool_timeout bounds how long
    a request waits for one.
    """
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "5")),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "300")),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "10")),
    }
