"""Shared snapshot of active deals, refreshed on every change notification."""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol

from src.logging import get_logger
from src.models.deal import Deal
from src.models.notification import NotificationSink, UserSignal, build_notification, log_sink

logger = get_logger(__name__)

CatalogListener = Callable[[list[Deal]], Awaitable[None]]


class DealStore(Protocol):
    async def fetch_active_deals(self, now: Optional[datetime] = None) -> list[Deal]:
        ...

    async def subscribe(self, callback):
        ...


class DealCatalog:
    """Holds the latest deal snapshot for every ranking pass.

    Any change notification triggers a full refetch; the notification payload
    is never used to patch the snapshot. A failed fetch keeps the previous
    snapshot.
    """

    def __init__(self, store: DealStore, notify: NotificationSink = log_sink):
        self.store = store
        self.notify = notify
        self._deals: list[Deal] = []
        self._loaded = False
        self._subscription = None
        self._listeners: list[CatalogListener] = []
        self.last_refreshed: Optional[datetime] = None

    @property
    def deals(self) -> list[Deal]:
        return list(self._deals)

    @property
    def loaded(self) -> bool:
        """True once a snapshot has been fetched successfully."""
        return self._loaded

    def add_listener(self, listener: CatalogListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CatalogListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def start(self) -> None:
        """Subscribe to deal changes and load the first snapshot."""
        if self._subscription is None:
            try:
                self._subscription = await self.store.subscribe(self._on_change)
            except Exception as e:
                # Without notifications the catalog still serves explicit refreshes
                logger.error("deal_subscription_failed", error=str(e), exc_info=True)
        await self.refresh()

    async def stop(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            try:
                await subscription.close()
            except Exception as e:
                logger.error("deal_unsubscribe_failed", error=str(e), exc_info=True)

    async def refresh(self) -> bool:
        """Refetch the active deals. Returns False if the fetch failed."""
        try:
            deals = await self.store.fetch_active_deals()
        except Exception as e:
            logger.error("deals_fetch_failed", error=str(e), kept=len(self._deals), exc_info=True)
            self.notify(build_notification(UserSignal.DEALS_LOAD_FAILED))
            return False

        self._deals = deals
        self._loaded = True
        self.last_refreshed = datetime.utcnow()
        logger.info("deals_refreshed", count=len(deals))

        for listener in list(self._listeners):
            try:
                await listener(self.deals)
            except Exception as e:
                logger.error("deal_listener_failed", error=str(e), exc_info=True)
        return True

    def active_deals(self, now: Optional[datetime] = None) -> list[Deal]:
        """Snapshot filtered to deals still inside their window at ``now``."""
        now = now or datetime.utcnow()
        return [deal for deal in self._deals if deal.is_active_at(now)]

    async def _on_change(self, payload: dict) -> None:
        logger.info("deal_change_received", event=payload.get("event"))
        await self.refresh()
