"""
Common Keyboards.

Inline buttons that open the Mini App.
"""

from urllib.parse import urlencode

from aiogram.types import InlineKeyboardMarkup, WebAppInfo
from aiogram.utils.keyboard import InlineKeyboardBuilder

from focusdesk.backend.core.config import get_app_config


def build_webapp_url(invite_code: str | None = None) -> str:
    """Mini App URL, optionally opening an invite."""
    url = get_app_config().application.telegram.webapp_url
    if invite_code:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode({'invite': invite_code})}"
    return url


def get_open_app_keyboard(
    invite_code: str | None = None,
    text: str = "🚀 Open Focusdesk",
) -> InlineKeyboardMarkup:
    """
    Single-button keyboard that launches the Mini App.

    Example:
        await message.answer("Welcome", reply_markup=get_open_app_keyboard())
    """
    builder = InlineKeyboardBuilder()
    builder.button(text=text, web_app=WebAppInfo(url=build_webapp_url(invite_code)))
    return builder.as_markup()
