"""
Bot and Dispatcher.

The aiogram objects are built on first use so importing the package never
needs a bot token. Messages default to HTML parse mode; every text the bot
sends escapes user input accordingly.
"""

from typing import TYPE_CHECKING

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

# Shown in the chat's command menu
BOT_COMMANDS = {
    "start": "Open Focusdesk",
    "help": "What the bot does",
}

_bot: "Bot | None" = None
_dispatcher: "Dispatcher | None" = None


def create_bot() -> "Bot":
    """
    Build the Bot from TELEGRAM_BOT_TOKEN.

    Raises:
        RuntimeError: If the token is not configured
    """
    from aiogram import Bot
    from aiogram.client.default import DefaultBotProperties
    from aiogram.enums import ParseMode

    from focusdesk.backend.core.config import get_settings

    token = get_settings().telegram_bot_token
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is empty. Set it in config/.env")

    logger.info("Telegram bot created")
    return Bot(token=token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))


def create_dispatcher() -> "Dispatcher":
    from aiogram import Dispatcher

    from focusdesk.telegram.handlers import get_all_routers
    from focusdesk.telegram.middlewares import setup_middlewares

    dp = Dispatcher()
    setup_middlewares(dp)
    dp.include_routers(*get_all_routers())
    return dp


def get_bot() -> "Bot":
    global _bot
    if _bot is None:
        _bot = create_bot()
    return _bot


def get_dispatcher() -> "Dispatcher":
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = create_dispatcher()
    return _dispatcher


async def publish_commands(bot: "Bot") -> None:
    """Replace the bot's command menu with BOT_COMMANDS."""
    from aiogram.types import BotCommand

    await bot.set_my_commands(
        [BotCommand(command=name, description=text) for name, text in BOT_COMMANDS.items()]
    )


async def setup_webhook(bot: "Bot", webhook_url: str, secret_token: str) -> None:
    """
    Point Telegram at our webhook and publish the command menu.

    Pending updates are dropped; they were addressed to the previous
    deployment.
    """
    await bot.set_webhook(
        url=webhook_url,
        secret_token=secret_token or None,
        drop_pending_updates=True,
        allowed_updates=get_dispatcher().resolve_used_update_types(),
    )
    await publish_commands(bot)
    logger.info("Webhook configured", extra={"webhook_url": webhook_url})


async def cleanup_bot(bot: "Bot") -> None:
    """Close the bot's HTTP session. The webhook stays registered across restarts."""
    await bot.session.close()
    logger.info("Bot session closed")
