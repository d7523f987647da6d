"""
Telegram Bot Keyboards.
"""

from focusdesk.telegram.keyboards.common import build_webapp_url, get_open_app_keyboard

__all__ = [
    "build_webapp_url",
    "get_open_app_keyboard",
]
