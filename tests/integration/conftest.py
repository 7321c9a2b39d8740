"""Fixtures for repository tests against a throwaway SQLite database."""

from unittest.mock import AsyncMock, Mock

import pytest_asyncio

from src.config.settings import Settings
from src.storage.database import Database


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(Settings(bot_token="123:abc", database_url=f"sqlite+aiosqlite:///{tmp_path}/test.db"))
    await database.connect()
    await database.create_tables()
    try:
        yield database
    finally:
        await database.disconnect()


@pytest_asyncio.fixture
async def change_feed():
    feed = AsyncMock()
    feed.deals_channel = Mock(return_value="dealradar:deals")
    feed.favorites_channel = Mock(side_effect=lambda user_id: f"dealradar:favorites:{user_id}")
    return feed
