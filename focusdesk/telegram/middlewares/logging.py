"""
Update Logging Middleware.

Binds the update's chat and sender to structlog contextvars for the
duration of the handler, so logs written by services called from a
handler (user registration, invite lookups) carry the same context.
"""

import time
from typing import Any, Awaitable, Callable

import structlog
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from focusdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


def update_context(event: TelegramObject) -> dict[str, Any]:
    """Loggable fields of an update. Command arguments (invite codes) are left out."""
    if not isinstance(event, Update):
        return {}

    context: dict[str, Any] = {"update_id": event.update_id, "update_type": event.event_type}
    if event.message:
        message = event.message
        context["chat_id"] = message.chat.id
        if message.from_user:
            context["tg_id"] = message.from_user.id
        if message.text and message.text.startswith("/"):
            context["command"] = message.text.split()[0]
    elif event.callback_query and event.callback_query.from_user:
        context["tg_id"] = event.callback_query.from_user.id
    return context


class LoggingMiddleware(BaseMiddleware):
    """Outer update middleware: ``dp.update.outer_middleware(LoggingMiddleware())``."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        started = time.perf_counter()
        context = update_context(event)

        with structlog.contextvars.bound_contextvars(**context):
            log_with_source(logger, "telegram", "info", "Telegram update received")
            try:
                result = await handler(event, data)
            except Exception as e:
                log_with_source(
                    logger,
                    "telegram",
                    "error",
                    "Telegram update processing error",
                    error=str(e),
                    error_type=type(e).__name__,
                    elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                raise

            log_with_source(
                logger,
                "telegram",
                "debug",
                "Telegram update processed",
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        return result
