"""Command routing configuration for bot handlers.

Registers all command, callback and message handlers with the bot application.
"""

from telegram.ext import Application

from src.handlers.discovery.explore_handler import get_explore_handlers
from src.handlers.favorites.favorite_handler import get_favorite_handlers
from src.handlers.system.start_handler import get_help_handler, get_start_handler
from src.logging import get_logger

logger = get_logger(__name__)


def register_handlers(app: Application) -> None:
    """
    Register all handlers with the application.

    Args:
        app: Telegram bot Application instance
    """
    app.add_handler(get_start_handler())
    app.add_handler(get_help_handler())
    logger.info("handler_registered", handler="system")

    for handler in get_explore_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="explore")

    for handler in get_favorite_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="favorites")
