"""Favorite state store.

Keeps the signed-in user's favorite deals in memory and in sync with the
backend. The local set is only ever changed from a confirmed backend
response, never ahead of it. Any change notification for the user (insert,
update or delete, from this device or another) triggers a full refetch that
replaces the local set wholesale; the notification payload is ignored.
The same refetch runs whenever the client comes back to the foreground, to
cover notifications missed while it was away.
"""

from enum import Enum
from typing import Optional, Protocol
from uuid import UUID

from src.logging import get_logger
from src.logging.audit import AuditLogger
from src.models.favorite import FavoriteRecord
from src.models.notification import NotificationSink, UserSignal, build_notification, log_sink

logger = get_logger(__name__)


class FavoriteBackend(Protocol):
    async def list_for_user(self, user_id: int) -> list[FavoriteRecord]:
        ...

    async def insert(self, user_id: int, deal_id: UUID) -> FavoriteRecord:
        ...

    async def delete(self, user_id: int, favorite_id: UUID) -> bool:
        ...

    async def subscribe(self, user_id: int, callback):
        ...


class ToggleOutcome(str, Enum):
    """Result of a favorite toggle."""

    ADDED = "ADDED"
    REMOVED = "REMOVED"
    SIGN_IN_REQUIRED = "SIGN_IN_REQUIRED"
    FAILED = "FAILED"


class FavoriteStore:
    """Per-session set of favorited deal ids."""

    def __init__(self, backend: FavoriteBackend, notify: NotificationSink = log_sink):
        """
        Initialize favorite store.

        Args:
            backend: Favorite repository (select/insert/delete/subscribe)
            notify: Sink for user-facing notifications
        """
        self.backend = backend
        self.notify = notify
        self._user_id: Optional[int] = None
        self._records: dict[UUID, FavoriteRecord] = {}
        self._subscription = None
        self._loaded = False
        # Bumped on every identity change; responses for an older
        # generation are dropped
        self._generation = 0

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def favorites(self) -> list[FavoriteRecord]:
        """Favorite records, newest first."""
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)

    @property
    def favorite_ids(self) -> frozenset[UUID]:
        return frozenset(self._records)

    def is_favorite(self, deal_id: UUID) -> bool:
        """Pure lookup; False before the first load or when signed out."""
        return deal_id in self._records

    async def start(self, user_id: int) -> None:
        """Bind the store to ``user_id``. Idempotent for the same user."""
        if self._user_id == user_id and self._subscription is not None:
            return
        if self._user_id is not None:
            await self.stop()

        self._generation += 1
        self._user_id = user_id
        try:
            self._subscription = await self.backend.subscribe(user_id, self._on_change)
        except Exception as e:
            # Foreground reconciliation still converges without push
            logger.error("favorites_subscription_failed", user_id=user_id, error=str(e), exc_info=True)
        AuditLogger.log_session(user_id, started=True)
        await self.refetch()

    async def stop(self) -> None:
        """Tear down the subscription and forget the user's favorites. Idempotent."""
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            try:
                await subscription.close()
            except Exception as e:
                logger.error("favorites_unsubscribe_failed", user_id=self._user_id, error=str(e), exc_info=True)

        if self._user_id is not None:
            AuditLogger.log_session(self._user_id, started=False)
        self._generation += 1
        self._user_id = None
        self._records = {}
        self._loaded = False

    async def refetch(self) -> bool:
        """Replace the local set with the backend's. Returns False on failure."""
        user_id = self._user_id
        if user_id is None:
            self._records = {}
            return True

        generation = self._generation
        try:
            records = await self.backend.list_for_user(user_id)
        except Exception as e:
            logger.error("favorites_fetch_failed", user_id=user_id, error=str(e), exc_info=True)
            if generation == self._generation:
                self.notify(build_notification(UserSignal.FAVORITES_LOAD_FAILED, user_id=user_id))
            return False

        if generation != self._generation:
            logger.debug("favorites_fetch_discarded", user_id=user_id)
            return False

        self._records = {record.deal_id: record for record in records}
        self._loaded = True
        logger.info("favorites_refetched", user_id=user_id, count=len(records))
        return True

    async def on_foreground(self) -> bool:
        """Client became visible again; reconcile unconditionally."""
        logger.debug("favorites_foreground_refetch", user_id=self._user_id)
        return await self.refetch()

    async def toggle_favorite(self, deal_id: UUID) -> ToggleOutcome:
        """Flip the favorite state of ``deal_id`` for the signed-in user."""
        user_id = self._user_id
        if user_id is None:
            AuditLogger.log_sign_in_required(deal_id)
            self.notify(build_notification(UserSignal.SIGN_IN_REQUIRED, deal_id=str(deal_id)))
            return ToggleOutcome.SIGN_IN_REQUIRED

        generation = self._generation
        existing = self._records.get(deal_id)
        try:
            if existing is not None:
                await self.backend.delete(user_id, existing.id)
                outcome = ToggleOutcome.REMOVED
                record = existing
            else:
                record = await self.backend.insert(user_id, deal_id)
                outcome = ToggleOutcome.ADDED
        except Exception as e:
            logger.error(
                "favorite_toggle_failed",
                user_id=user_id,
                deal_id=str(deal_id),
                error=str(e),
                exc_info=True,
            )
            AuditLogger.log_toggle_failed(user_id, deal_id, str(e))
            self.notify(build_notification(UserSignal.FAVORITE_TOGGLE_FAILED, deal_id=str(deal_id)))
            # Resync with the backend before the next tap
            await self.refetch()
            return ToggleOutcome.FAILED

        if generation != self._generation:
            # Identity changed mid-flight; the new user's set is not ours to touch
            return outcome

        if outcome is ToggleOutcome.REMOVED:
            self._records.pop(deal_id, None)
            AuditLogger.log_favorite_removed(user_id, deal_id, record.id)
            self.notify(build_notification(UserSignal.FAVORITE_REMOVED, deal_id=str(deal_id)))
        else:
            self._records[deal_id] = record
            AuditLogger.log_favorite_added(user_id, deal_id, record.id)
            self.notify(build_notification(UserSignal.FAVORITE_ADDED, deal_id=str(deal_id)))
        return outcome

    async def _on_change(self, payload: dict) -> None:
        logger.info("favorite_change_received", user_id=self._user_id, event=payload.get("event"))
        await self.refetch()
