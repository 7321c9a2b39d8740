"""Background sweep that retires idle chat sessions."""

import asyncio
from typing import Awaitable, Callable

from src.logging import get_logger

logger = get_logger(__name__)


class SessionReaper:
    """Runs ``sweep`` every ``interval_seconds`` until stopped."""

    def __init__(self, sweep: Callable[[], Awaitable[int]], interval_seconds: float = 300.0):
        """Initialize session reaper.

        Args:
            sweep: Coroutine function that expires idle sessions and returns
                how many it removed
            interval_seconds: Pause between sweeps
        """
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start reaper loop."""
        self._running = True
        logger.info("session_reaper_started", interval_seconds=self.interval_seconds)

        while self._running:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    async def stop(self) -> None:
        """Stop reaper loop."""
        self._running = False
        logger.info("session_reaper_stopped")

    async def run_once(self) -> int:
        """One sweep. Errors are logged and count as zero expired."""
        try:
            expired = await self.sweep()
        except Exception as e:
            logger.error("session_sweep_failed", error=str(e), exc_info=True)
            return 0
        if expired:
            logger.info("idle_sessions_expired", count=expired)
        return expired
