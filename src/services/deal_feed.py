"""Per-user driver that feeds the ranking pipeline.

The feed owns one user's filter inputs and re-runs the pipeline whenever an
input, the location or the deal snapshot changes. It never ranks before both
a settled location attempt and a loaded snapshot are available.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from src.logging import get_logger
from src.models.deal import Deal, GeoPoint, RankedDeal, UserPreferences
from src.models.notification import NotificationSink, UserSignal, build_notification, log_sink
from src.services.categories import available_categories
from src.services.deal_catalog import DealCatalog
from src.services.discovery_ranking import DiscoveryRankingService
from src.services.location_tracker import LocationStatus, LocationTracker

logger = get_logger(__name__)

FeedListener = Callable[[list[RankedDeal]], Awaitable[None]]


class DealFeed:
    """Ranked deal list for one user."""

    def __init__(
        self,
        catalog: DealCatalog,
        tracker: LocationTracker,
        ranking: Optional[DiscoveryRankingService] = None,
        notify: NotificationSink = log_sink,
        on_update: Optional[FeedListener] = None,
    ):
        self.catalog = catalog
        self.tracker = tracker
        self.ranking = ranking or DiscoveryRankingService()
        self.notify = notify
        self.on_update = on_update

        self.preferences: Optional[UserPreferences] = None
        self.preference_filter_enabled = True
        self.manual_categories: set[str] = set()
        self.search_text = ""

        self._ranked: list[RankedDeal] = []
        self._started = False
        self._denial_reported = False

    @property
    def ranked(self) -> list[RankedDeal]:
        return list(self._ranked)

    @property
    def location(self) -> Optional[GeoPoint]:
        return self.tracker.location

    @property
    def ready(self) -> bool:
        return self.catalog.loaded and self.tracker.settled

    @property
    def available_categories(self) -> list[str]:
        return available_categories(self.catalog.deals)

    async def start(self) -> list[RankedDeal]:
        """Settle location and snapshot together, then rank."""
        if not self._started:
            self._started = True
            self.catalog.add_listener(self._on_catalog_refreshed)

        tasks = [self._settle_location(force=False)]
        if not self.catalog.loaded:
            tasks.append(self.catalog.refresh())
        await asyncio.gather(*tasks)
        return await self.recompute()

    async def stop(self) -> None:
        if self._started:
            self.catalog.remove_listener(self._on_catalog_refreshed)
            self._started = False
        self._ranked = []
        self._denial_reported = False

    async def refresh_location(self, force: bool = True) -> Optional[GeoPoint]:
        """Request a new fix and rank against it."""
        location = await self._settle_location(force=force)
        await self.recompute()
        return location

    async def recompute(self) -> list[RankedDeal]:
        """Run the pipeline on the latest inputs.

        Until both location and snapshot are available the previous output
        is returned unchanged.
        """
        if not self.ready:
            logger.debug(
                "feed_recompute_deferred",
                catalog_loaded=self.catalog.loaded,
                location_settled=self.tracker.settled,
            )
            return self.ranked

        self._ranked = self.ranking.rank(
            self.catalog.active_deals(),
            user_location=self.tracker.location,
            preferences=self.preferences,
            preference_filter_enabled=self.preference_filter_enabled,
            manual_categories=self.manual_categories,
            search_text=self.search_text,
        )
        if self.on_update is not None:
            await self.on_update(self.ranked)
        return self.ranked

    async def set_search_text(self, text: str) -> list[RankedDeal]:
        self.search_text = text or ""
        return await self.recompute()

    async def toggle_category(self, category: str) -> list[RankedDeal]:
        if category in self.manual_categories:
            self.manual_categories.discard(category)
        else:
            self.manual_categories.add(category)
        return await self.recompute()

    async def clear_filters(self) -> list[RankedDeal]:
        self.manual_categories = set()
        self.search_text = ""
        return await self.recompute()

    async def set_preferences(self, preferences: Optional[UserPreferences]) -> list[RankedDeal]:
        self.preferences = preferences
        return await self.recompute()

    async def set_preference_filter_enabled(self, enabled: bool) -> list[RankedDeal]:
        self.preference_filter_enabled = enabled
        return await self.recompute()

    def find(self, deal_id) -> Optional[Deal]:
        """Look up a deal in the current snapshot."""
        return next((deal for deal in self.catalog.deals if deal.id == deal_id), None)

    async def _settle_location(self, force: bool) -> Optional[GeoPoint]:
        location = await self.tracker.locate(force=force)
        if self.tracker.status is LocationStatus.DENIED:
            if not self._denial_reported:
                self._denial_reported = True
                self.notify(build_notification(UserSignal.LOCATION_DENIED))
        elif self.tracker.status is LocationStatus.RESOLVED:
            self._denial_reported = False
        return location

    async def _on_catalog_refreshed(self, deals: list[Deal]) -> None:
        await self.recompute()
