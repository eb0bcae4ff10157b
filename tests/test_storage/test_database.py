"""Tests for the Database pool wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.storage.database import Database


def _pool_with(conn):
    acquire_ctx = MagicMock()
    acquire_ctx.__aenter__ = AsyncMock(return_value=conn)
    acquire_ctx.__aexit__ = AsyncMock(return_value=False)
    pool = MagicMock()
    pool.acquire = MagicMock(return_value=acquire_ctx)
    pool.close = AsyncMock()
    return pool


class TestDatabase:
    def test_defaults_from_settings(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_MAX_SIZE", "4")
        db = Database()
        assert db._max_size == 4
        assert not db.is_connected

    @pytest.mark.asyncio
    async def test_query_before_connect(self):
        db = Database("postgresql://localhost/x")
        with pytest.raises(RuntimeError, match="not connected"):
            await db.fetch("SELECT 1")

    @pytest.mark.asyncio
    async def test_connect_passes_pool_options(self):
        pool = _pool_with(AsyncMock())
        with patch("src.storage.database.asyncpg.create_pool", AsyncMock(return_value=pool)) as create:
            db = Database("postgresql://localhost/x", min_size=1, max_size=3)
            await db.connect()

        assert db.is_connected
        kwargs = create.call_args.kwargs
        assert kwargs["min_size"] == 1
        assert kwargs["max_size"] == 3
        assert kwargs["server_settings"] == {"application_name": "userfeedback"}

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self):
        with patch(
            "src.storage.database.asyncpg.create_pool",
            AsyncMock(side_effect=OSError("connection refused")),
        ):
            db = Database("postgresql://localhost/x")
            with pytest.raises(OSError):
                await db.connect()
        assert not db.is_connected

    @pytest.mark.asyncio
    async def test_execute_returns_status(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="DELETE 1")
        db = Database("postgresql://localhost/x")
        db._pool = _pool_with(conn)

        assert await db.execute("DELETE FROM userfeedback WHERE uuid = $1", "abc") == "DELETE 1"
        conn.execute.assert_awaited_once_with("DELETE FROM userfeedback WHERE uuid = $1", "abc")

    @pytest.mark.asyncio
    async def test_health_check(self):
        conn = AsyncMock()
        conn.fetchval = AsyncMock(return_value=1)
        db = Database("postgresql://localhost/x")
        db._pool = _pool_with(conn)

        assert await db.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self):
        conn = AsyncMock()
        conn.fetchval = AsyncMock(side_effect=ConnectionError("gone"))
        db = Database("postgresql://localhost/x")
        db._pool = _pool_with(conn)

        assert await db.health_check() is False

    @pytest.mark.asyncio
    async def test_close(self):
        pool = _pool_with(AsyncMock())
        db = Database("postgresql://localhost/x")
        db._pool = pool

        await db.close()
        await db.close()

        pool.close.assert_awaited_once()
        assert not db.is_connected
