"""Startup and help handlers.

/start registers the chat user, which is what "signed in" means for the
bot: favorites and preferences need a registered user.
"""

from telegram import KeyboardButton, ReplyKeyboardMarkup, Update
from telegram.ext import CommandHandler, ContextTypes

from src.handlers.session import SESSION_KEY
from src.logging import get_logger
from src.models.user import UserInput
from src.services.categories import PREFERENCE_CATEGORIES
from src.services.user_session import UserSession

logger = get_logger(__name__)

HELP_TEXT = (
    "Here's what you can do:\n"
    "• /explore [text] — Discover deals near you\n"
    "• /favorites — Your saved deals\n"
    "• /preferences " + " ".join(PREFERENCE_CATEGORIES) + " — Pick what you like\n"
    "• Share your location to see what's nearby"
)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Register the user (if needed) and show the welcome message."""
    user_repo = context.bot_data["user_repo"]
    telegram_user = update.effective_user

    existing = await user_repo.get_by_telegram_id(telegram_user.id)
    if existing:
        user = existing
        greeting = f"👋 Welcome back, {telegram_user.first_name}!"
    else:
        user = await user_repo.create(
            UserInput(telegram_user_id=telegram_user.id, telegram_username=telegram_user.username)
        )
        greeting = f"👋 Welcome to Deal Radar, {telegram_user.first_name}!"
        logger.info("user_registered", user_id=user.id, telegram_user_id=telegram_user.id)

    # A chat session opened before registration switches to the new identity
    session: UserSession | None = context.user_data.get(SESSION_KEY)
    if session is not None and session.user_id != user.id:
        await session.sign_in(user.id)

    keyboard = [[KeyboardButton("📍 Share location", request_location=True)]]
    reply_markup = ReplyKeyboardMarkup(keyboard, one_time_keyboard=True, resize_keyboard=True)

    await update.message.reply_text(f"{greeting}\n\n{HELP_TEXT}", reply_markup=reply_markup)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show available commands."""
    await update.message.reply_text(f"ℹ️ Help\n\n{HELP_TEXT}")


def get_start_handler() -> CommandHandler:
    return CommandHandler("start", start_command)


def get_help_handler() -> CommandHandler:
    return CommandHandler("help", help_command)
