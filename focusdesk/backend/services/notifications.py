"""
Notification Dispatcher.

Creates a queued NotificationLog and hands delivery to the
``deliver_notification`` background task. When the request's
BackgroundTasks are available the job is sent after the response is
built; otherwise it is sent inline.
"""

from typing import Any

from fastapi import BackgroundTasks
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.models.enums import NotificationStatus
from focusdesk.backend.models.notification import NotificationLog
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.notification import NotificationLogRepository

logger = get_logger(__name__)


async def dispatch_delivery(
    tg_id: int,
    text: str,
    type: str,
    user_id: str,
    log_id: str,
) -> None:
    """Send the delivery job to the task queue."""
    from focusdesk.backend.tasks.notifications import register_tasks

    try:
        await register_tasks()["deliver_notification"].kiq(
            tg_id=tg_id,
            text=text,
            type=type,
            user_id=user_id,
            log_id=log_id,
        )
    except (RedisError, OSError) as e:
        # The log stays queued; the row is the record of the missed send
        logger.error(
            "Failed to enqueue notification",
            extra={"log_id": log_id, "type": type, "error": str(e)},
        )


class NotificationDispatcher:
    """Queue Telegram notifications for users."""

    def __init__(
        self,
        session: AsyncSession,
        background_tasks: BackgroundTasks | None = None,
    ) -> None:
        self.session = session
        self.background_tasks = background_tasks
        self.logs = NotificationLogRepository(session)

    async def enqueue(
        self,
        user: User,
        type: str,
        text: str,
        payload: dict[str, Any] | None = None,
    ) -> NotificationLog | None:
        """
        Record and dispatch a notification.

        Returns:
            The queued log, or None when enqueueing is disabled
        """
        if not get_app_config().features.notifications_enqueue_enabled:
            logger.debug("Notification enqueue disabled", extra={"type": type})
            return None

        log = await self.logs.create(
            user_id=user.id,
            type=type,
            payload=payload,
            status=NotificationStatus.QUEUED.value,
        )

        job = {
            "tg_id": user.tg_id,
            "text": text,
            "type": type,
            "user_id": user.id,
            "log_id": log.id,
        }
        if self.background_tasks is not None:
            self.background_tasks.add_task(dispatch_delivery, **job)
        else:
            await dispatch_delivery(**job)

        logger.info(
            "Notification queued",
            extra={"log_id": log.id, "type": type, "user_id": user.id},
        )
        return log
