"""User-facing signals raised by the discovery and favorites services."""

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from src.logging import get_logger

logger = get_logger(__name__)


class UserSignal(str, Enum):
    """Signals the presentation layer can surface to the user."""

    LOCATION_DENIED = "LOCATION_DENIED"
    SIGN_IN_REQUIRED = "SIGN_IN_REQUIRED"
    FAVORITE_TOGGLE_FAILED = "FAVORITE_TOGGLE_FAILED"
    FAVORITES_LOAD_FAILED = "FAVORITES_LOAD_FAILED"
    DEALS_LOAD_FAILED = "DEALS_LOAD_FAILED"
    FAVORITE_ADDED = "FAVORITE_ADDED"
    FAVORITE_REMOVED = "FAVORITE_REMOVED"


class Notification(BaseModel):
    """A transient message for the user."""

    signal: UserSignal
    title: str
    description: str
    retryable: bool = False
    is_error: bool = False
    context: dict = Field(default_factory=dict)


_MESSAGES: dict[UserSignal, tuple[str, str, bool, bool]] = {
    # signal: (title, description, retryable, is_error)
    UserSignal.LOCATION_DENIED: (
        "Location access denied",
        "Showing all deals. Share your location for nearby results.",
        False,
        False,
    ),
    UserSignal.SIGN_IN_REQUIRED: (
        "Sign in required",
        "Please sign in to save favorites.",
        False,
        True,
    ),
    UserSignal.FAVORITE_TOGGLE_FAILED: (
        "Error",
        "Failed to update favorites. Please try again.",
        True,
        True,
    ),
    UserSignal.FAVORITES_LOAD_FAILED: (
        "Error",
        "Failed to load favorites.",
        True,
        True,
    ),
    UserSignal.DEALS_LOAD_FAILED: (
        "Error",
        "Failed to load deals. Showing the last results we had.",
        True,
        True,
    ),
    UserSignal.FAVORITE_ADDED: (
        "Added to favorites",
        "Deal saved to your favorites.",
        False,
        False,
    ),
    UserSignal.FAVORITE_REMOVED: (
        "Removed from favorites",
        "Deal removed from your favorites.",
        False,
        False,
    ),
}


NotificationSink = Callable[[Notification], None]


def build_notification(signal: UserSignal, **context) -> Notification:
    """Build the standard notification for a signal."""
    title, description, retryable, is_error = _MESSAGES[signal]
    return Notification(
        signal=signal,
        title=title,
        description=description,
        retryable=retryable,
        is_error=is_error,
        context=context,
    )


def log_sink(notification: Notification) -> None:
    """Default sink: write the notification to the log."""
    logger.info(
        "user_notification",
        signal=notification.signal.value,
        title=notification.title,
        **notification.context,
    )


class NotificationBuffer:
    """Collects notifications until the chat layer drains them."""

    def __init__(self, limit: Optional[int] = 20):
        self.limit = limit
        self._pending: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        log_sink(notification)
        self._pending.append(notification)
        if self.limit is not None and len(self._pending) > self.limit:
            del self._pending[0]

    def drain(self) -> list[Notification]:
        """Return and clear pending notifications."""
        pending, self._pending = self._pending, []
        return pending
