"""Shared test fixtures.

The store is a fresh SQLite file per test (aiosqlite driver), created from
the ORM metadata. Redis is left uninitialized unless a test injects a mock.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from helpers import CRON_SECRET
from rigrent import database, redis_client
from rigrent.config import get_settings
from rigrent.db import models  # noqa: F401
from rigrent.db.base import Base


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'rigrent.db'}"


@pytest.fixture(autouse=True)
def settings_env(monkeypatch, db_url):
    """Point settings at the per-test database and a known cron secret."""
    monkeypatch.setenv("RIGRENT_DATABASE_URL", db_url)
    monkeypatch.setenv("RIGRENT_CRON_SECRET", CRON_SECRET)
    monkeypatch.setenv("RIGRENT_SWEEP_CONCURRENCY", "1")
    monkeypatch.setenv("RIGRENT_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine(db_url) -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(db_url, connect_args={"timeout": 30})
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine, db_url) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a fresh app bound to the test database."""
    from rigrent.main import create_app

    app = create_app()
    await database.init_db(db_url)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await database.close_db()
    redis_client._client = None  # noqa: SLF001


@pytest.fixture
def cron_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {CRON_SECRET}"}
