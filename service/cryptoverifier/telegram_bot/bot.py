"""
Main Telegram bot handler.

Uses python-telegram-bot library with webhook mode (updates arrive through
the FastAPI endpoint), or long polling when TELEGRAM_USE_POLLING is set.
"""

from telegram import BotCommand, Update
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from cryptoverifier.config import get_settings
from cryptoverifier.logging_config import get_logger
from .handlers import (
    BOT_COMMANDS,
    handle_start_command,
    handle_help_command,
    handle_check_command,
    handle_report_command,
    handle_history_command,
    handle_forwarded_message,
    handle_error,
)

logger = get_logger("telegram_bot")

# Global application instance (initialized once)
_application: Application | None = None


def build_application(token: str) -> Application:
    """Create the application and register all handlers."""
    application = Application.builder().token(token).build()

    # Commands
    application.add_handler(CommandHandler("start", handle_start_command))
    application.add_handler(CommandHandler("help", handle_help_command))
    application.add_handler(CommandHandler("check", handle_check_command))
    application.add_handler(CommandHandler("report", handle_report_command))
    application.add_handler(CommandHandler("history", handle_history_command))

    # Forwarded messages (text or media caption), analyzed automatically
    application.add_handler(
        MessageHandler(
            filters.FORWARDED & (filters.TEXT | filters.CAPTION) & ~filters.COMMAND,
            handle_forwarded_message,
        )
    )

    # Error handler
    application.add_error_handler(handle_error)

    return application


def get_bot_application() -> Application:
    """Get or create telegram bot application."""
    global _application

    if _application is None:
        settings = get_settings()
        _application = build_application(settings.telegram_bot_token)
        logger.info("Telegram bot application initialized")

    return _application


async def handle_telegram_update(update_data: dict) -> None:
    """
    Process incoming webhook update from Telegram.

    Called by the FastAPI webhook endpoint in the background.
    """
    try:
        app = get_bot_application()

        # Convert dict to Update object
        update = Update.de_json(update_data, app.bot)

        if update:
            await app.process_update(update)
        else:
            logger.warning("Received invalid update data")

    except Exception as e:
        logger.error(f"Failed to process update: {e}", exc_info=True)


async def initialize_bot() -> None:
    """
    Initialize bot application (call on startup).

    Publishes the command menu and, in polling mode, starts fetching updates.
    """
    settings = get_settings()
    app = get_bot_application()
    await app.initialize()

    await app.bot.set_my_commands([BotCommand(name, description) for name, description in BOT_COMMANDS])

    if settings.telegram_use_polling:
        await app.start()
        await app.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        logger.info("Bot started in polling mode")

    logger.info("Bot initialized successfully")


async def shutdown_bot() -> None:
    """
    Shutdown bot application (call on shutdown).
    """
    global _application
    if _application:
        if _application.updater and _application.updater.running:
            await _application.updater.stop()
        if _application.running:
            await _application.stop()
        await _application.shutdown()
        _application = None
        logger.info("Bot shut down")
