"""Telegram bot startup and main application entry point."""

import asyncio

from telegram import BotCommand
from telegram.ext import Application

from src.bot.command_map import register_handlers
from src.config import load_settings
from src.handlers.session import SESSION_KEY, expire_idle_sessions
from src.logging import get_logger, setup_logging
from src.services.deal_catalog import DealCatalog
from src.services.discovery_ranking import DiscoveryRankingService
from src.services.geo import RegionRadiusPolicy
from src.services.session_reaper import SessionReaper
from src.storage.change_feed import ChangeFeed
from src.storage.database import Database
from src.storage.postgres_deal_store import PostgresDealStore
from src.storage.postgres_favorite_repo import PostgresFavoriteRepository
from src.storage.postgres_user_repo import PostgresUserRepository


async def setup_bot_menu(application: Application) -> None:
    """Configure bot menu commands."""
    commands = [
        BotCommand("start", "Start or restart the bot"),
        BotCommand("explore", "Discover deals near you"),
        BotCommand("favorites", "Your saved deals"),
        BotCommand("preferences", "Pick the kinds of deals you like"),
        BotCommand("help", "Show help and commands"),
    ]
    await application.bot.set_my_commands(commands)
    get_logger(__name__).info("bot_menu_configured", command_count=len(commands))


async def stop_user_sessions(application: Application) -> None:
    """Tear down every open chat session (subscriptions included)."""
    for user_data in application.user_data.values():
        session = user_data.get(SESSION_KEY)
        if session is not None:
            await session.stop()


async def main() -> None:
    """Initialize and start the Telegram bot."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger = get_logger(__name__)

    logger.info("Starting Deal Radar bot", environment=settings.environment)

    db = Database(settings)
    await db.connect()

    change_feed = ChangeFeed(settings.redis_url, prefix=settings.change_channel_prefix)
    await change_feed.connect()

    user_repo = PostgresUserRepository(db)
    favorite_repo = PostgresFavoriteRepository(db, change_feed)
    deal_store = PostgresDealStore(db, change_feed)

    ranking_service = DiscoveryRankingService(
        radius_policy=RegionRadiusPolicy(default_radius_km=settings.default_radius_km)
    )
    deal_catalog = DealCatalog(deal_store)
    await deal_catalog.start()

    application = Application.builder().token(settings.bot_token).build()

    application.bot_data["db"] = db
    application.bot_data["settings"] = settings
    application.bot_data["user_repo"] = user_repo
    application.bot_data["favorite_repo"] = favorite_repo
    application.bot_data["deal_store"] = deal_store
    application.bot_data["deal_catalog"] = deal_catalog
    application.bot_data["ranking_service"] = ranking_service

    register_handlers(application)
    await setup_bot_menu(application)

    logger.info("Bot initialization complete, starting polling")

    await application.initialize()
    await application.start()
    await application.updater.start_polling(allowed_updates=["message", "callback_query"])

    reaper = SessionReaper(
        lambda: expire_idle_sessions(application.user_data, settings.session_idle_ttl_seconds),
        interval_seconds=settings.session_sweep_interval_seconds,
    )
    reaper_task = asyncio.create_task(reaper.start())

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Shutting down bot")
    finally:
        await reaper.stop()
        reaper_task.cancel()
        await application.updater.stop()
        await application.stop()
        await stop_user_sessions(application)
        await deal_catalog.stop()
        await application.shutdown()
        await change_feed.disconnect()
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
