"""Explore handler: ranked nearby deals with search, categories and favorites."""

from math import ceil

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes, MessageHandler, filters

from src.handlers import ERROR_TEMPLATES
from src.handlers.session import drain_notifications, flush_notifications, format_notifications, get_user_session
from src.logging import get_logger
from src.models.deal import UserPreferences
from src.services.categories import PREFERENCE_CATEGORIES, canonical_preference
from src.services.geo import format_distance
from src.services.user_session import UserSession

logger = get_logger(__name__)

PAGE_KEY = "explore_page"

CATEGORY_ICONS = {
    "Food": "🍽️",
    "Drinks": "🍹",
    "Nightlife": "🌙",
    "Events": "🎵",
}


def render_feed(session: UserSession, page: int, page_size: int) -> tuple[str, InlineKeyboardMarkup]:
    """Build the feed message and its keyboard for one page."""
    feed = session.deal_feed
    store = session.favorite_store
    ranked = feed.ranked

    total_pages = max(1, ceil(len(ranked) / page_size))
    page = min(max(page, 0), total_pages - 1)
    start_idx = page * page_size
    page_deals = ranked[start_idx:start_idx + page_size]

    if feed.location is not None:
        header = f"📍 Deals near you ({len(ranked)})"
    else:
        header = f"🔍 Active deals ({len(ranked)})"
    if feed.search_text.strip():
        header += f" matching \"{feed.search_text.strip()}\""

    lines = [header, ""]
    keyboard = []

    if not page_deals:
        lines.append(ERROR_TEMPLATES["no_deals"]())

    for position, ranked_deal in enumerate(page_deals, start=start_idx + 1):
        deal = ranked_deal.deal
        icon = CATEGORY_ICONS.get(ranked_deal.category, "💎")
        details = [f"⏰ {deal.time_remaining_label()}"]
        if ranked_deal.distance_km is not None:
            details.insert(0, format_distance(ranked_deal.distance_km))
        lines.append(f"{position}. {icon} {deal.title} — {deal.venue_name}")
        lines.append(f"   {' · '.join(details)}")

        heart = "❤️" if store.is_favorite(deal.id) else "🤍"
        keyboard.append([InlineKeyboardButton(f"{heart} {deal.title[:40]}", callback_data=f"fav:{deal.id}")])

    category_row = [
        InlineKeyboardButton(
            f"{'✅ ' if tag in feed.manual_categories else ''}{tag}",
            callback_data=f"explore:cat:{index}",
        )
        for index, tag in enumerate(feed.available_categories)
    ]
    for i in range(0, len(category_row), 3):
        keyboard.append(category_row[i:i + 3])

    controls = []
    if page > 0:
        controls.append(InlineKeyboardButton("⬅️", callback_data=f"explore:page:{page - 1}"))
    if feed.preferences is not None and not feed.preferences.is_empty:
        label = "✨ For you: on" if feed.preference_filter_enabled else "✨ For you: off"
        controls.append(InlineKeyboardButton(label, callback_data="explore:prefs"))
    if feed.manual_categories or feed.search_text:
        controls.append(InlineKeyboardButton("✖️ Clear", callback_data="explore:clear"))
    if page < total_pages - 1:
        controls.append(InlineKeyboardButton("➡️", callback_data=f"explore:page:{page + 1}"))
    if controls:
        keyboard.append(controls)

    if total_pages > 1:
        lines.append("")
        lines.append(f"Page {page + 1}/{total_pages}")

    return "\n".join(lines), InlineKeyboardMarkup(keyboard)


async def explore_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /explore [search text]."""
    session = await get_user_session(update, context)
    page_size = context.bot_data["settings"].deals_page_size

    await session.deal_feed.refresh_location(force=False)
    await session.deal_feed.set_search_text(" ".join(context.args or []))
    context.user_data[PAGE_KEY] = 0

    text, markup = render_feed(session, 0, page_size)
    await update.message.reply_text(text, reply_markup=markup)
    await flush_notifications(update, context)

    logger.info(
        "explore_viewed",
        telegram_user_id=update.effective_user.id,
        results=len(session.deal_feed.ranked),
        has_location=session.deal_feed.location is not None,
    )


async def handle_explore_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle category, preference, clear and pagination callbacks."""
    query = update.callback_query
    session = await get_user_session(update, context)
    feed = session.deal_feed
    page_size = context.bot_data["settings"].deals_page_size

    # explore:{action}[:{value}]
    parts = query.data.split(":", 2)
    action = parts[1] if len(parts) > 1 else ""
    page = context.user_data.get(PAGE_KEY, 0)

    if action == "cat" and len(parts) == 3 and parts[2].isdigit():
        # Index into available_categories; callback data is capped at 64 bytes
        categories = feed.available_categories
        index = int(parts[2])
        if index >= len(categories):
            await query.answer("⚠️ Categories changed. Run /explore again.")
            return
        await feed.toggle_category(categories[index])
        page = 0
    elif action == "prefs":
        await feed.set_preference_filter_enabled(not feed.preference_filter_enabled)
        page = 0
    elif action == "clear":
        await feed.clear_filters()
        page = 0
    elif action == "page" and len(parts) == 3 and parts[2].isdigit():
        page = int(parts[2])
    else:
        await query.answer("❌ Invalid request")
        return

    context.user_data[PAGE_KEY] = page
    pending = drain_notifications(context)
    await query.answer(format_notifications(pending)[:200] if pending else None)

    text, markup = render_feed(session, page, page_size)
    await query.edit_message_text(text, reply_markup=markup)


async def location_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Store a shared location and show the nearby feed."""
    user_repo = context.bot_data["user_repo"]
    telegram_user = update.effective_user
    location = update.message.location

    user = await user_repo.get_by_telegram_id(telegram_user.id)
    if user is None:
        await update.message.reply_text(ERROR_TEMPLATES["not_registered"]())
        return

    await user_repo.update_location(telegram_user.id, location.latitude, location.longitude)

    session = await get_user_session(update, context)
    await session.deal_feed.refresh_location(force=True)
    context.user_data[PAGE_KEY] = 0

    text, markup = render_feed(session, 0, context.bot_data["settings"].deals_page_size)
    await update.message.reply_text(f"📍 Location updated.\n\n{text}", reply_markup=markup)
    await flush_notifications(update, context)


async def preferences_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /preferences [Food Drinks ...]: show or replace preference categories."""
    user_repo = context.bot_data["user_repo"]
    telegram_user = update.effective_user

    user = await user_repo.get_by_telegram_id(telegram_user.id)
    if user is None:
        await update.message.reply_text(ERROR_TEMPLATES["not_registered"]())
        return

    if not context.args:
        current = ", ".join(user.preferences.categories) or "none"
        await update.message.reply_text(
            f"✨ Your preferences: {current}\n\n"
            f"Set them with /preferences {' '.join(PREFERENCE_CATEGORIES)}"
        )
        return

    picked = []
    for arg in context.args:
        category = canonical_preference(arg)
        if category is None:
            await update.message.reply_text(
                ERROR_TEMPLATES["invalid_input"](
                    "category", f"Choose from {', '.join(PREFERENCE_CATEGORIES)}"
                )
            )
            return
        if category not in picked:
            picked.append(category)

    preferences = UserPreferences(categories=picked)
    await user_repo.update_preferences(telegram_user.id, preferences)

    session = await get_user_session(update, context)
    await session.deal_feed.set_preferences(preferences)

    await update.message.reply_text(f"✅ Preferences saved: {', '.join(picked)}")


def get_explore_handlers() -> list:
    return [
        CommandHandler("explore", explore_command),
        CommandHandler("preferences", preferences_command),
        CallbackQueryHandler(handle_explore_callback, pattern=r"^explore:"),
        MessageHandler(filters.LOCATION, location_message),
    ]
