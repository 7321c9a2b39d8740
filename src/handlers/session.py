"""Per-chat user session wiring shared by the handlers."""

from typing import Any, Mapping

from telegram import Update
from telegram.ext import ContextTypes

from src.config.settings import Settings
from src.logging import get_logger
from src.models.notification import Notification, NotificationBuffer
from src.services.deal_feed import DealFeed
from src.services.favorite_store import FavoriteStore
from src.services.location_tracker import LocationTracker, PositionOptions, StoredLocationSource
from src.services.user_session import UserSession

logger = get_logger(__name__)

SESSION_KEY = "session"
NOTIFICATIONS_KEY = "notifications"


def position_options(settings: Settings) -> PositionOptions:
    return PositionOptions(
        high_accuracy=settings.geolocation_high_accuracy,
        timeout_seconds=settings.geolocation_timeout_seconds,
        max_age_seconds=settings.geolocation_max_age_seconds,
    )


async def get_user_session(update: Update, context: ContextTypes.DEFAULT_TYPE) -> UserSession:
    """Return this chat user's session, creating and starting it on first use."""
    session: UserSession | None = context.user_data.get(SESSION_KEY)
    if session is not None:
        session.touch()
        return session

    settings: Settings = context.bot_data["settings"]
    user_repo = context.bot_data["user_repo"]
    telegram_user = update.effective_user

    buffer = NotificationBuffer()
    tracker = LocationTracker(
        StoredLocationSource(user_repo, telegram_user.id),
        position_options(settings),
    )
    feed = DealFeed(
        context.bot_data["deal_catalog"],
        tracker,
        ranking=context.bot_data["ranking_service"],
        notify=buffer,
    )
    store = FavoriteStore(context.bot_data["favorite_repo"], notify=buffer)

    user = await user_repo.get_by_telegram_id(telegram_user.id)
    if user is not None:
        feed.preferences = user.preferences

    session = UserSession(store, feed, user_id=user.id if user else None)
    context.user_data[SESSION_KEY] = session
    context.user_data[NOTIFICATIONS_KEY] = buffer
    await session.start()

    logger.info("chat_session_created", telegram_user_id=telegram_user.id, signed_in=session.signed_in)
    return session


def drain_notifications(context: ContextTypes.DEFAULT_TYPE) -> list[Notification]:
    buffer: NotificationBuffer | None = context.user_data.get(NOTIFICATIONS_KEY)
    if buffer is None:
        return []
    return buffer.drain()


def format_notifications(notifications: list[Notification]) -> str:
    return "\n".join(f"{'⚠️' if n.is_error else 'ℹ️'} {n.title}: {n.description}" for n in notifications)


async def flush_notifications(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send pending notifications to the chat as one message."""
    pending = drain_notifications(context)
    if pending and update.effective_message is not None:
        await update.effective_message.reply_text(format_notifications(pending))


async def expire_idle_sessions(user_data: Mapping[Any, dict], idle_ttl_seconds: float) -> int:
    """Stop and drop sessions unused for ``idle_ttl_seconds``. Returns the count.

    The next update from that user builds a fresh session.
    """
    expired = 0
    for data in list(user_data.values()):
        session: UserSession | None = data.get(SESSION_KEY)
        if session is None or session.idle_seconds() < idle_ttl_seconds:
            continue
        data.pop(SESSION_KEY, None)
        data.pop(NOTIFICATIONS_KEY, None)
        await session.stop()
        expired += 1
        logger.info("chat_session_expired", user_id=session.user_id)
    return expired
