"""
Telegram Bot Handlers.

The bot is a thin entry point: /start opens the Mini App, where all
work happens.
"""

from aiogram import Router

from focusdesk.telegram.handlers.common import router as common_router

__all__ = [
    "get_all_routers",
    "common_router",
]


def get_all_routers() -> list[Router]:
    """Routers to include in the dispatcher."""
    return [common_router]
