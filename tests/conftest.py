"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from src.models.deal import Deal, GeoPoint, Region

# Uptown Charlotte
CITY_CENTER = GeoPoint(lat=35.227, lng=-80.843)

# One degree of latitude is ~111.19 km
KM_PER_DEGREE_LAT = 6371.0 * 3.141592653589793 / 180


def point_north_of(origin: GeoPoint, km: float) -> GeoPoint:
    """A point ``km`` kilometers due north of ``origin``."""
    return GeoPoint(lat=origin.lat + km / KM_PER_DEGREE_LAT, lng=origin.lng)


def make_region(name: str, km_from_center: float = 0.0, active: bool = True) -> Region:
    return Region(name=name, center=point_north_of(CITY_CENTER, km_from_center), active=active)


def make_deal(
    title: str = "Half-price tacos",
    deal_type: str = "food",
    region: Optional[Region] = None,
    description: str = "Every taco half off until close",
    venue_name: str = "Taco Spot",
    **overrides,
) -> Deal:
    now = datetime.utcnow()
    fields = dict(
        id=uuid4(),
        title=title,
        description=description,
        venue_name=venue_name,
        deal_type=deal_type,
        starts_at=now - timedelta(hours=1),
        expires_at=now + timedelta(hours=3),
        region=region,
        region_id=region.id if region else None,
    )
    fields.update(overrides)
    return Deal(**fields)


@pytest.fixture
def city_center() -> GeoPoint:
    return CITY_CENTER


@pytest.fixture
def mock_subscription():
    """Change-feed subscription handle."""
    subscription = Mock()
    subscription.close = AsyncMock()
    return subscription


@pytest.fixture
def mock_favorite_repo(mock_subscription):
    """Favorite backend with an empty favorite set."""
    repo = AsyncMock()
    repo.list_for_user.return_value = []
    repo.subscribe.return_value = mock_subscription
    return repo


@pytest.fixture
def mock_deal_store(mock_subscription):
    """Deal store returning no deals until configured."""
    store = AsyncMock()
    store.fetch_active_deals.return_value = []
    store.subscribe.return_value = mock_subscription
    return store


@pytest.fixture
def mock_telegram_update():
    """Mock Telegram update fixture."""
    update = Mock()
    update.effective_user = Mock()
    update.effective_user.id = 12345
    update.effective_user.username = "testuser"
    update.effective_user.first_name = "Test"
    update.message = Mock()
    update.message.text = "/start"
    update.message.reply_text = AsyncMock()
    update.effective_message = update.message
    return update


@pytest.fixture
def mock_telegram_context():
    """Mock Telegram context fixture."""
    context = Mock()
    context.bot = Mock()
    context.args = []
    context.bot_data = {}
    context.user_data = {}
    return context


@pytest.fixture
def deal_factory():
    """Build deals: ``deal_factory(title=..., deal_type=..., region=...)``."""
    return make_deal


@pytest.fixture
def region_factory():
    """Build regions: ``region_factory(name, km_from_center)``."""
    return make_region
