"""Geolocation acquisition with timeout, cache age and stale-result discard."""

import asyncio
import time
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, Field

from src.logging import get_logger
from src.models.deal import GeoPoint

logger = get_logger(__name__)


class LocationPermissionDenied(Exception):
    """The user refused (or never granted) access to their location."""


class LocationUnavailable(Exception):
    """No usable position could be produced."""


class PositionOptions(BaseModel):
    """Options passed to the geolocation source."""

    high_accuracy: bool = True
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_age_seconds: float = Field(default=300.0, ge=0)


class GeolocationSource(Protocol):
    """One-shot position provider."""

    async def get_current_position(self, options: PositionOptions) -> GeoPoint:
        ...


class LocationStatus(str, Enum):
    """Outcome of the most recent applied request."""

    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    DENIED = "DENIED"
    UNAVAILABLE = "UNAVAILABLE"
    TIMED_OUT = "TIMED_OUT"


class LocationTracker:
    """Owns the last known user location for one session.

    Every request is numbered. A result that arrives after a newer request
    has already been applied is dropped, so an old fix never replaces one
    the user has already seen. Failures keep the last known fix.
    """

    def __init__(
        self,
        source: GeolocationSource,
        options: Optional[PositionOptions] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.options = options or PositionOptions()
        self._clock = clock
        self._location: Optional[GeoPoint] = None
        self._resolved_at: Optional[float] = None
        self._issued = 0
        self._applied = 0
        self.status = LocationStatus.PENDING

    @property
    def location(self) -> Optional[GeoPoint]:
        return self._location

    @property
    def settled(self) -> bool:
        """True once any request has finished, whatever its outcome."""
        return self.status is not LocationStatus.PENDING

    def _is_fresh(self) -> bool:
        if self._location is None or self._resolved_at is None:
            return False
        return self._clock() - self._resolved_at < self.options.max_age_seconds

    async def locate(self, force: bool = False) -> Optional[GeoPoint]:
        """Return the user's location, requesting a new fix when needed.

        Never raises for location problems; an unknown location is None.
        """
        if not force and self._is_fresh():
            return self._location

        self._issued += 1
        seq = self._issued

        point: Optional[GeoPoint] = None
        try:
            point = await asyncio.wait_for(
                self.source.get_current_position(self.options),
                timeout=self.options.timeout_seconds,
            )
            status = LocationStatus.RESOLVED
        except asyncio.TimeoutError:
            status = LocationStatus.TIMED_OUT
        except LocationPermissionDenied:
            status = LocationStatus.DENIED
        except LocationUnavailable:
            status = LocationStatus.UNAVAILABLE
        except Exception as e:
            logger.error("location_source_error", error=str(e), exc_info=True)
            status = LocationStatus.UNAVAILABLE

        if seq <= self._applied:
            logger.debug("location_result_discarded", request=seq, applied=self._applied)
            return self._location

        self._applied = seq
        self.status = status
        if point is not None:
            self._location = point
            self._resolved_at = self._clock()
            logger.info("location_resolved", lat=point.lat, lng=point.lng)
        else:
            logger.info("location_not_resolved", status=status.value, has_previous=self._location is not None)
        return self._location

    def reset(self) -> None:
        """Forget the cached fix (e.g. on sign-out)."""
        self._location = None
        self._resolved_at = None
        self._applied = self._issued
        self.status = LocationStatus.PENDING


class StoredLocationSource:
    """Geolocation source backed by the location a user last shared in chat."""

    def __init__(self, user_repo, telegram_user_id: int):
        self.user_repo = user_repo
        self.telegram_user_id = telegram_user_id

    async def get_current_position(self, options: PositionOptions) -> GeoPoint:
        user = await self.user_repo.get_by_telegram_id(self.telegram_user_id)
        if user is None or user.last_location is None:
            raise LocationPermissionDenied("no location shared")

        if user.last_location_updated is not None and options.max_age_seconds > 0:
            age = datetime.utcnow() - user.last_location_updated
            if age > timedelta(seconds=options.max_age_seconds):
                raise LocationUnavailable("shared location is too old")

        return user.last_location
