"""Per-user session: the single owner of favorite and feed state."""

import time
from typing import Callable, Optional

from src.logging import get_logger
from src.services.deal_feed import DealFeed
from src.services.favorite_store import FavoriteStore

logger = get_logger(__name__)


class UserSession:
    """Lifecycle object created on session start and torn down on sign-out.

    ``start`` and ``stop`` are idempotent. Switching identity replaces the
    favorite subscription and local set; nothing carries over between users.
    """

    def __init__(
        self,
        favorite_store: FavoriteStore,
        deal_feed: DealFeed,
        user_id: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.favorite_store = favorite_store
        self.deal_feed = deal_feed
        self.user_id = user_id
        self._running = False
        self._clock = clock
        self.last_active = clock()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    def touch(self) -> None:
        """Mark the session as used now."""
        self.last_active = self._clock()

    def idle_seconds(self) -> float:
        return self._clock() - self.last_active

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        if self.user_id is not None:
            await self.favorite_store.start(self.user_id)
        await self.deal_feed.start()
        logger.info("user_session_started", user_id=self.user_id)

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        await self.favorite_store.stop()
        await self.deal_feed.stop()
        logger.info("user_session_stopped", user_id=self.user_id)

    async def sign_in(self, user_id: int) -> None:
        """Switch the session to ``user_id``."""
        self.user_id = user_id
        if self._running:
            await self.favorite_store.start(user_id)

    async def sign_out(self) -> None:
        self.user_id = None
        await self.favorite_store.stop()
        self.deal_feed.tracker.reset()

    async def on_foreground(self) -> None:
        """Reconcile state after the client was away."""
        await self.favorite_store.on_foreground()
        await self.deal_feed.recompute()
