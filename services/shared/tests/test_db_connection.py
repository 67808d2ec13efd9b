"""Tests for database URL resolution and session handling."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from list_pages_shared.db.connection import DatabaseConnection, get_database_url


class TestDatabaseUrl:
    """Tests for reading the async database URL."""

    def test_missing_url(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="DATABASE_URL"):
                get_database_url()

    def test_sync_driver_is_rewritten(self):
        with patch.dict(os.environ, {"DATABASE_URL": "mssql+pyodbc://db/list_pages"}, clear=True):
            assert get_database_url() == "mssql+aioodbc://db/list_pages"

    def test_async_url_is_kept(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite+aiosqlite:///list_pages.db"}, clear=True):
            assert get_database_url() == "sqlite+aiosqlite:///list_pages.db"


class TestDatabaseSession:
    """Tests for the committing session context."""

    @pytest.fixture
    def connection(self):
        session = MagicMock()
        session.commit = AsyncMock()
        session.rollback = AsyncMock()
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)

        db = DatabaseConnection(url="sqlite+aiosqlite://")
        db._session_factory = MagicMock(return_value=session)
        return db, session

    @pytest.mark.asyncio
    async def test_commit_on_success(self, connection):
        db, session = connection

        async with db.session() as active:
            assert active is session

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, connection):
        db, session = connection

        with pytest.raises(RuntimeError):
            async with db.session():
                raise RuntimeError("boom")

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_without_engine(self):
        db = DatabaseConnection(url="sqlite+aiosqlite://")

        await db.close()

        assert db._engine is None
