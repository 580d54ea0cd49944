"""Async SQLAlchemy engine and session factory.

The API opens one session per request through ``get_session``. The sweep
opens one session per rental unit through ``get_session_factory()``, so a
failing unit only rolls back its own work.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_NOT_READY = "Database not initialized. Call init_db() first."


def _engine_options(url: str) -> dict[str, Any]:
    # SQLite only backs the test suite; it has no pool tuning and needs a busy timeout.
    if url.startswith("sqlite"):
        return {"connect_args": {"timeout": 30}}
    return {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_pre_ping": True,
        # pgbouncer in transaction mode cannot keep prepared statements
        "connect_args": {"statement_cache_size": 0},
    }


async def init_db(url: str) -> None:
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(url, echo=False, **_engine_options(url))
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory  # noqa: PLW0603
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError(_NOT_READY)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session (FastAPI dependency)."""
    async with get_session_factory()() as session:
        yield session
