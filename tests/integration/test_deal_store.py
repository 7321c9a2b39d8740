"""Integration tests for the deal store."""

from datetime import datetime, timedelta

import pytest

from src.storage.db_models import DealTable, RegionTable
from src.storage.postgres_deal_store import PostgresDealStore

NOW = datetime(2026, 10, 19, 18, 0)


async def seed(db):
    async with db.session() as session:
        downtown = RegionTable(name="Downtown", center_lat=35.227, center_lng=-80.843, active=True)
        closed = RegionTable(name="Old Mill District", center_lat=35.3, center_lng=-80.8, active=False)
        session.add_all([downtown, closed])
        await session.flush()

        session.add_all([
            DealTable(
                title="Taco Tuesday", venue_name="Taco Spot", deal_type="food",
                starts_at=NOW - timedelta(hours=1), expires_at=NOW + timedelta(hours=2),
                region_id=downtown.id, created_at=NOW - timedelta(minutes=30),
            ),
            DealTable(
                title="Mill Pints", venue_name="Mill Bar", deal_type="bar",
                starts_at=NOW - timedelta(hours=1), expires_at=NOW + timedelta(hours=2),
                region_id=closed.id, created_at=NOW - timedelta(minutes=10),
            ),
            DealTable(
                title="Ended", venue_name="Cafe", deal_type="coffee",
                starts_at=NOW - timedelta(hours=5), expires_at=NOW - timedelta(hours=1),
            ),
            DealTable(
                title="Tomorrow", venue_name="Cafe", deal_type="coffee",
                starts_at=NOW + timedelta(days=1), expires_at=NOW + timedelta(days=1, hours=2),
            ),
            DealTable(
                title="Paused", venue_name="Cafe", deal_type="coffee", active=False,
                starts_at=NOW - timedelta(hours=1), expires_at=NOW + timedelta(hours=2),
            ),
        ])


@pytest.mark.asyncio
async def test_fetch_active_deals_window(db, change_feed):
    """Test only active, in-window deals are returned, newest first."""
    await seed(db)
    store = PostgresDealStore(db, change_feed)

    deals = await store.fetch_active_deals(now=NOW)

    assert [d.title for d in deals] == ["Mill Pints", "Taco Tuesday"]


@pytest.mark.asyncio
async def test_active_region_is_attached(db, change_feed):
    await seed(db)
    store = PostgresDealStore(db, change_feed)

    deals = {d.title: d for d in await store.fetch_active_deals(now=NOW)}

    assert deals["Taco Tuesday"].region.name == "Downtown"
    assert deals["Taco Tuesday"].region.center.lat == pytest.approx(35.227)


@pytest.mark.asyncio
async def test_inactive_region_is_not_attached(db, change_feed):
    await seed(db)
    store = PostgresDealStore(db, change_feed)

    deals = {d.title: d for d in await store.fetch_active_deals(now=NOW)}

    assert deals["Mill Pints"].region is None
    assert deals["Mill Pints"].region_id is not None


@pytest.mark.asyncio
async def test_subscribe_and_publish_use_deals_channel(db, change_feed):
    store = PostgresDealStore(db, change_feed)
    callback = object()

    await store.subscribe(callback)
    await store.publish_change("UPDATE", deal_id="abc")

    change_feed.subscribe.assert_awaited_once_with("dealradar:deals", callback)
    change_feed.publish.assert_awaited_once_with("dealradar:deals", "UPDATE", deal_id="abc")
