"""
Telegram Bot Module.

aiogram v3 integration: the bot that opens the Mini App and delivers
notifications.

Structure:
    focusdesk/telegram/
    ├── bot.py               # Bot and dispatcher setup
    ├── webhook.py           # Webhook endpoint for FastAPI
    ├── handlers/            # /start (with invite deep links), /help
    ├── keyboards/           # Mini App buttons
    ├── middlewares/         # Update logging
    └── services/            # Rate-limited notification sending

Usage:
    from focusdesk.telegram import get_bot, get_dispatcher
    from focusdesk.telegram.webhook import get_webhook_router

    app.include_router(get_webhook_router(get_bot(), get_dispatcher()))
"""

from focusdesk.telegram.bot import create_bot, create_dispatcher, get_bot, get_dispatcher

__all__ = [
    "create_bot",
    "create_dispatcher",
    "get_bot",
    "get_dispatcher",
]
