"""
Notification Service.

Sends notification messages to users via Telegram with a per-chat
sliding-window rate limit.

Usage:
    service = get_notification_service()
    result = await service.send(tg_id, "⏰ <b>Deadline tomorrow</b>")
    if not result.success:
        ...
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from focusdesk.backend.core.concurrency import get_semaphore
from focusdesk.backend.core.logging import get_logger, log_with_source
from focusdesk.backend.core.utils import utc_now

logger = get_logger(__name__)

# Telegram allows about one message per second per chat, with bursts
RATE_LIMIT_PER_CHAT = 20  # messages per window
RATE_LIMIT_WINDOW = 60  # seconds


@dataclass
class NotificationResult:
    """Result of a notification send attempt."""

    success: bool
    tg_id: int
    message_id: int | None = None
    error: str | None = None
    rate_limited: bool = False
    timestamp: datetime = field(default_factory=utc_now)


class NotificationService:
    """Rate-limited wrapper around ``Bot.send_message``."""

    def __init__(
        self,
        bot: Any = None,
        limit: int = RATE_LIMIT_PER_CHAT,
        window: int = RATE_LIMIT_WINDOW,
    ) -> None:
        self._bot = bot
        self._limit = limit
        self._window = window
        self._sent: dict[int, list[float]] = defaultdict(list)

    @property
    def bot(self) -> Any:
        if self._bot is None:
            from focusdesk.telegram.bot import get_bot

            self._bot = get_bot()
        return self._bot

    def _check_rate_limit(self, tg_id: int) -> bool:
        """Record an attempt; False when the chat is over its limit."""
        now = time.time()
        self._prune(now - self._window)

        if len(self._sent[tg_id]) >= self._limit:
            return False

        self._sent[tg_id].append(now)
        return True

    def _prune(self, window_start: float) -> None:
        """Drop timestamps outside the window and chats left with none."""
        for chat_id in list(self._sent):
            recent = [ts for ts in self._sent[chat_id] if ts > window_start]
            if recent:
                self._sent[chat_id] = recent
            else:
                del self._sent[chat_id]

    async def send(
        self,
        tg_id: int,
        text: str,
        disable_notification: bool = False,
        reply_markup: Any = None,
    ) -> NotificationResult:
        """
        Send a message to a chat.

        Telegram errors are reported in the result, not raised.
        """
        from aiogram.exceptions import TelegramAPIError

        if not self._check_rate_limit(tg_id):
            log_with_source(logger, "telegram", "warning", "Rate limit exceeded for chat", tg_id=tg_id)
            return NotificationResult(
                success=False,
                tg_id=tg_id,
                rate_limited=True,
                error="Rate limit exceeded",
            )

        try:
            async with get_semaphore("telegram"):
                message = await self.bot.send_message(
                    chat_id=tg_id,
                    text=text,
                    disable_notification=disable_notification,
                    reply_markup=reply_markup,
                )
        except TelegramAPIError as e:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Failed to send notification",
                tg_id=tg_id,
                error=str(e),
            )
            return NotificationResult(success=False, tg_id=tg_id, error=str(e))

        log_with_source(
            logger,
            "telegram",
            "info",
            "Notification sent",
            tg_id=tg_id,
            message_id=message.message_id,
        )
        return NotificationResult(success=True, tg_id=tg_id, message_id=message.message_id)


_notification_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Get or create the notification service singleton."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
