"""Unit tests for location acquisition."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from src.models.deal import GeoPoint
from src.services.location_tracker import (
    LocationPermissionDenied,
    LocationStatus,
    LocationTracker,
    LocationUnavailable,
    PositionOptions,
    StoredLocationSource,
)

HOME = GeoPoint(lat=35.227, lng=-80.843)
WORK = GeoPoint(lat=35.300, lng=-80.700)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class ScriptedSource:
    """Source whose responses are released one by one by the test."""

    def __init__(self):
        self.pending: list[asyncio.Future] = []

    async def wait_for_requests(self, count):
        while len(self.pending) < count:
            await asyncio.sleep(0)

    async def get_current_position(self, options):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


def source_returning(*results):
    source = Mock()
    source.get_current_position = AsyncMock(side_effect=list(results))
    return source


@pytest.mark.asyncio
async def test_resolves_location():
    tracker = LocationTracker(source_returning(HOME))
    assert tracker.status is LocationStatus.PENDING
    assert not tracker.settled

    assert await tracker.locate() == HOME
    assert tracker.status is LocationStatus.RESOLVED
    assert tracker.settled


@pytest.mark.asyncio
async def test_fresh_fix_is_reused_until_max_age():
    clock = FakeClock()
    source = source_returning(HOME, WORK)
    tracker = LocationTracker(source, PositionOptions(max_age_seconds=300), clock=clock)

    await tracker.locate()
    clock.now += 299
    assert await tracker.locate() == HOME
    assert source.get_current_position.await_count == 1

    clock.now += 2
    assert await tracker.locate() == WORK
    assert source.get_current_position.await_count == 2


@pytest.mark.asyncio
async def test_force_bypasses_cache():
    source = source_returning(HOME, WORK)
    tracker = LocationTracker(source)

    await tracker.locate()
    assert await tracker.locate(force=True) == WORK


@pytest.mark.asyncio
async def test_denial_settles_without_location():
    tracker = LocationTracker(source_returning(LocationPermissionDenied("no")))

    assert await tracker.locate() is None
    assert tracker.status is LocationStatus.DENIED
    assert tracker.settled


@pytest.mark.asyncio
async def test_timeout_settles_without_location():
    """Test a source that never answers is cut off by the timeout."""
    tracker = LocationTracker(ScriptedSource(), PositionOptions(timeout_seconds=0.01))

    assert await tracker.locate() is None
    assert tracker.status is LocationStatus.TIMED_OUT


@pytest.mark.asyncio
async def test_failure_keeps_last_known_fix():
    tracker = LocationTracker(source_returning(HOME, LocationUnavailable("gps off")))

    await tracker.locate()
    assert await tracker.locate(force=True) == HOME
    assert tracker.status is LocationStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_unexpected_source_error_is_unavailable():
    tracker = LocationTracker(source_returning(RuntimeError("db down")))

    assert await tracker.locate() is None
    assert tracker.status is LocationStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_older_request_finishing_last_is_discarded():
    """Test an out-of-order response never replaces a newer fix."""
    source = ScriptedSource()
    tracker = LocationTracker(source)

    first = asyncio.create_task(tracker.locate(force=True))
    await source.wait_for_requests(1)
    second = asyncio.create_task(tracker.locate(force=True))
    await source.wait_for_requests(2)

    source.pending[1].set_result(WORK)
    assert await second == WORK
    source.pending[0].set_result(HOME)
    assert await first == WORK

    assert tracker.location == WORK


@pytest.mark.asyncio
async def test_reset_discards_in_flight_request():
    source = ScriptedSource()
    tracker = LocationTracker(source)

    in_flight = asyncio.create_task(tracker.locate())
    await source.wait_for_requests(1)
    tracker.reset()
    source.pending[0].set_result(HOME)
    await in_flight

    assert tracker.location is None
    assert tracker.status is LocationStatus.PENDING


class TestStoredLocationSource:
    """Tests for the chat-shared location source."""

    def _repo(self, user):
        repo = AsyncMock()
        repo.get_by_telegram_id.return_value = user
        return repo

    def _user(self, location, updated):
        user = Mock()
        user.last_location = location
        user.last_location_updated = updated
        return user

    @pytest.mark.asyncio
    async def test_returns_shared_location(self):
        source = StoredLocationSource(self._repo(self._user(HOME, datetime.utcnow())), 12345)
        assert await source.get_current_position(PositionOptions()) == HOME

    @pytest.mark.asyncio
    async def test_unknown_user_is_denied(self):
        source = StoredLocationSource(self._repo(None), 12345)
        with pytest.raises(LocationPermissionDenied):
            await source.get_current_position(PositionOptions())

    @pytest.mark.asyncio
    async def test_never_shared_is_denied(self):
        source = StoredLocationSource(self._repo(self._user(None, None)), 12345)
        with pytest.raises(LocationPermissionDenied):
            await source.get_current_position(PositionOptions())

    @pytest.mark.asyncio
    async def test_old_location_is_unavailable(self):
        stale = datetime.utcnow() - timedelta(hours=1)
        source = StoredLocationSource(self._repo(self._user(HOME, stale)), 12345)
        with pytest.raises(LocationUnavailable):
            await source.get_current_position(PositionOptions(max_age_seconds=300))

    @pytest.mark.asyncio
    async def test_zero_max_age_accepts_any_age(self):
        stale = datetime.utcnow() - timedelta(days=3)
        source = StoredLocationSource(self._repo(self._user(HOME, stale)), 12345)
        assert await source.get_current_position(PositionOptions(max_age_seconds=0)) == HOME
