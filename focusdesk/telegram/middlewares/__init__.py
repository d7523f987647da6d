"""
Telegram Bot Middlewares.
"""

from typing import TYPE_CHECKING

from focusdesk.telegram.middlewares.logging import LoggingMiddleware

if TYPE_CHECKING:
    from aiogram import Dispatcher

__all__ = [
    "LoggingMiddleware",
    "setup_middlewares",
]


def setup_middlewares(dp: "Dispatcher") -> None:
    """Register middlewares on the dispatcher."""
    dp.update.outer_middleware(LoggingMiddleware())
