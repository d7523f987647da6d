"""
Notification Delivery Task.

``deliver_notification`` drains the queue filled by
NotificationDispatcher: it sends the Telegram message and records the
outcome on the NotificationLog.

Usage (without Redis, e.g. in tests):
    from focusdesk.backend.tasks.notifications import deliver_notification

    await deliver_notification(tg_id=1, text="Hi", type="task_assigned", user_id="...")
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.database import get_session_factory
from focusdesk.backend.core.exceptions import ExternalServiceError
from focusdesk.backend.core.logging import get_logger, log_with_source
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.enums import NotificationStatus
from focusdesk.backend.repositories.notification import NotificationLogRepository
from focusdesk.telegram.services.notifications import NotificationResult, get_notification_service

logger = get_logger(__name__)


def delivery_values(result: NotificationResult) -> dict[str, Any]:
    """Column values describing a send outcome."""
    if result.success:
        return {"status": NotificationStatus.SENT.value, "sent_at": utc_now(), "error": None}
    return {"status": NotificationStatus.FAILED.value, "error": result.error}


async def record_delivery(
    session: AsyncSession,
    result: NotificationResult,
    user_id: str,
    type: str,
    log_id: str | None = None,
) -> int:
    """
    Write a send outcome to the notification log.

    The log is addressed by ``log_id``. Without one, or when it no longer
    exists, every queued log of the same user and type is updated.

    Returns:
        Number of log rows updated
    """
    repo = NotificationLogRepository(session)
    values = delivery_values(result)

    if log_id:
        log = await repo.get_by_id_or_none(log_id)
        if log is not None:
            await repo.update(log, **values)
            return 1
        logger.warning("Notification log not found, matching by user", extra={"log_id": log_id})

    return await repo.mark_queued_for_user(user_id, type, **values)


async def deliver_notification(
    tg_id: int,
    text: str,
    type: str,
    user_id: str,
    log_id: str | None = None,
) -> dict[str, Any]:
    """
    Send one queued notification.

    Raises:
        ExternalServiceError: When Telegram refused the message, so the
            queue retries it
        Exception: Whatever the sender raised, after the log is marked failed
    """
    try:
        result = await get_notification_service().send(tg_id, text)
    except Exception as e:
        failure = NotificationResult(success=False, tg_id=tg_id, error=str(e))
        async with get_session_factory()() as session:
            await record_delivery(session, failure, user_id, type, log_id)
            await session.commit()
        log_with_source(
            logger,
            "tasks",
            "error",
            "Notification delivery raised",
            log_id=log_id,
            type=type,
            error=str(e),
        )
        raise

    async with get_session_factory()() as session:
        updated = await record_delivery(session, result, user_id, type, log_id)
        await session.commit()

    log_with_source(
        logger,
        "tasks",
        "info" if result.success else "warning",
        "Notification delivery finished",
        log_id=log_id,
        type=type,
        success=result.success,
        logs_updated=updated,
    )

    if not result.success:
        raise ExternalServiceError(f"Telegram delivery failed: {result.error}")

    return {
        "status": NotificationStatus.SENT.value,
        "log_id": log_id,
        "message_id": result.message_id,
        "sent_at": result.timestamp.isoformat(),
    }


_registered: dict[str, Any] | None = None


def register_tasks() -> dict[str, Any]:
    """
    Register on-demand tasks with the broker (once per process).

    Returns:
        Dict mapping task names to registered task objects
    """
    global _registered
    if _registered is not None:
        return _registered

    from focusdesk.backend.tasks.broker import get_broker

    broker = get_broker()
    _registered = {
        "deliver_notification": broker.task(
            task_name="deliver_notification",
            retry_on_error=True,
            max_retries=get_app_config().notifications.deliver_max_retries,
        )(deliver_notification),
    }

    logger.info(
        "Tasks registered with broker",
        extra={"task_count": len(_registered), "tasks": list(_registered.keys())},
    )
    return _registered
