"""Integration tests for the user repository."""

import pytest

from src.models.deal import GeoPoint, UserPreferences
from src.models.user import UserInput
from src.storage.postgres_user_repo import PostgresUserRepository


@pytest.mark.asyncio
async def test_create_and_get(db):
    repo = PostgresUserRepository(db)

    created = await repo.create(UserInput(telegram_user_id=12345, telegram_username="testuser"))
    fetched = await repo.get_by_telegram_id(12345)

    assert fetched.id == created.id
    assert fetched.telegram_username == "testuser"
    assert fetched.preferences.is_empty
    assert fetched.last_location is None


@pytest.mark.asyncio
async def test_get_unknown_user(db):
    assert await PostgresUserRepository(db).get_by_telegram_id(999) is None


@pytest.mark.asyncio
async def test_update_location(db):
    repo = PostgresUserRepository(db)
    await repo.create(UserInput(telegram_user_id=12345))

    await repo.update_location(12345, 35.227, -80.843)
    user = await repo.get_by_telegram_id(12345)

    assert user.last_location == GeoPoint(lat=35.227, lng=-80.843)
    assert user.last_location_updated is not None


@pytest.mark.asyncio
async def test_update_preferences(db):
    repo = PostgresUserRepository(db)
    await repo.create(UserInput(telegram_user_id=12345))

    await repo.update_preferences(12345, UserPreferences(categories=["Drinks", "Events"]))
    user = await repo.get_by_telegram_id(12345)

    assert user.preferences.categories == ["Drinks", "Events"]


@pytest.mark.asyncio
async def test_update_unknown_user_raises(db):
    with pytest.raises(ValueError):
        await PostgresUserRepository(db).update_location(999, 0.0, 0.0)
