"""Favorite toggle callbacks and the /favorites list."""

from uuid import UUID

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes

from src.handlers import ERROR_TEMPLATES
from src.handlers.discovery.explore_handler import PAGE_KEY, render_feed
from src.handlers.session import drain_notifications, flush_notifications, get_user_session
from src.logging import get_logger
from src.services.favorite_store import ToggleOutcome
from src.services.user_session import UserSession

logger = get_logger(__name__)

TOGGLE_ANSWERS = {
    ToggleOutcome.ADDED: "❤️ Added to favorites",
    ToggleOutcome.REMOVED: "🤍 Removed from favorites",
}


def render_favorites(session: UserSession) -> tuple[str, InlineKeyboardMarkup | None]:
    """List favorited deals that are still in the active snapshot."""
    feed = session.deal_feed
    records = session.favorite_store.favorites

    lines = [f"❤️ Your favorites ({len(records)})", ""]
    keyboard = []
    for record in records:
        deal = feed.find(record.deal_id)
        if deal is None:
            lines.append("• (no longer active)")
            continue
        lines.append(f"• {deal.title} — {deal.venue_name} · ⏰ {deal.time_remaining_label()}")
        keyboard.append(
            [InlineKeyboardButton(f"🗑️ {deal.title[:40]}", callback_data=f"favlist:{deal.id}")]
        )

    if not records:
        lines.append("No favorites yet. Tap 🤍 on a deal in /explore to save it.")

    return "\n".join(lines), InlineKeyboardMarkup(keyboard) if keyboard else None


async def favorites_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /favorites: reconcile with the backend, then list."""
    session = await get_user_session(update, context)
    if not session.signed_in:
        await update.message.reply_text(ERROR_TEMPLATES["not_registered"]())
        return

    await session.on_foreground()
    text, markup = render_favorites(session)
    await update.message.reply_text(text, reply_markup=markup)
    await flush_notifications(update, context)


async def handle_favorite_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle fav:{deal_id} (from the feed) and favlist:{deal_id} (from /favorites)."""
    query = update.callback_query
    prefix, _, raw_id = query.data.partition(":")
    try:
        deal_id = UUID(raw_id)
    except ValueError:
        await query.answer("❌ Invalid request")
        return

    session = await get_user_session(update, context)
    outcome = await session.favorite_store.toggle_favorite(deal_id)
    # The answer below already tells the user what happened
    drain_notifications(context)

    if outcome is ToggleOutcome.SIGN_IN_REQUIRED:
        await query.answer(ERROR_TEMPLATES["sign_in_required"](), show_alert=True)
        return
    if outcome is ToggleOutcome.FAILED:
        await query.answer(ERROR_TEMPLATES["favorite_failed"](), show_alert=True)
        return

    await query.answer(TOGGLE_ANSWERS[outcome])
    logger.info("favorite_toggled", telegram_user_id=update.effective_user.id, deal_id=raw_id, outcome=outcome.value)

    if prefix == "favlist":
        text, markup = render_favorites(session)
    else:
        page = context.user_data.get(PAGE_KEY, 0)
        text, markup = render_feed(session, page, context.bot_data["settings"].deals_page_size)
    await query.edit_message_text(text, reply_markup=markup)


def get_favorite_handlers() -> list:
    return [
        CommandHandler("favorites", favorites_command),
        CallbackQueryHandler(handle_favorite_callback, pattern=r"^fav(list)?:"),
    ]
