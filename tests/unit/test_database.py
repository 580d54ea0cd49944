"""Unit tests for engine options and session factory lifecycle."""

import pytest

from rigrent import database


class TestEngineOptions:
    def test_sqlite_gets_busy_timeout_only(self):
        assert database._engine_options("sqlite+aiosqlite:///x.db") == {"connect_args": {"timeout": 30}}  # noqa: SLF001

    def test_postgres_disables_statement_cache(self):
        options = database._engine_options("postgresql+asyncpg://u:p@db/rigrent")  # noqa: SLF001
        assert options["connect_args"] == {"statement_cache_size": 0}
        assert options["pool_pre_ping"] is True


class TestSessionFactory:
    @pytest.mark.asyncio
    async def test_unavailable_after_close(self, tmp_path):
        await database.init_db(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
        assert database.get_session_factory() is not None

        await database.close_db()

        with pytest.raises(RuntimeError, match="init_db"):
            database.get_session_factory()
