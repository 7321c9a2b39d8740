"""Integration test for database bootstrap and connectivity."""

import pytest
from sqlalchemy import inspect, text


@pytest.mark.asyncio
async def test_database_connection(db):
    """Test database connection can be established."""
    async with db.session() as session:
        result = await session.execute(text("SELECT 1"))
        assert result.scalar() == 1


@pytest.mark.asyncio
async def test_database_tables_exist(db):
    """Test required tables are created."""
    async with db.session() as session:
        connection = await session.connection()
        tables = await connection.run_sync(lambda conn: inspect(conn).get_table_names())

    for table_name in ["regions", "deals", "users", "user_favorites"]:
        assert table_name in tables


@pytest.mark.asyncio
async def test_session_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        async with db.session() as session:
            await session.execute(text("INSERT INTO users (telegram_user_id, preferences, created_at, updated_at) "
                                       "VALUES (1, '{}', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)"))
            raise RuntimeError("boom")

    async with db.session() as session:
        result = await session.execute(text("SELECT COUNT(*) FROM users"))
        assert result.scalar() == 0
