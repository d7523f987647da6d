"""
Scheduled Background Tasks.

Daily deadline scans. These are registered with the broker together with
schedule metadata that the TaskiqScheduler reads via LabelScheduleSource.

Schedule Format:
    schedule=[{"cron": "* * * * *", "args": [...], "kwargs": {...}}]

Cron Format:
    ┌───────────── minute (0-59)
    │ ┌───────────── hour (0-23)
    │ │ ┌───────────── day of month (1-31)
    │ │ │ ┌───────────── month (1-12)
    │ │ │ │ ┌───────────── day of week (0-6, Sun=0)
    │ │ │ │ │
    * * * * *

Crons come from config/settings/notifications.yaml and are evaluated in
UTC. Jobs disabled there are not registered.

Usage:
    from focusdesk.backend.tasks.scheduled import register_scheduled_tasks
    register_scheduled_tasks()

    # Start scheduler
    python cli.py --service scheduler
"""

from datetime import timedelta
from html import escape
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.database import get_session_factory
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.enums import NotificationStatus, NotificationType
from focusdesk.backend.models.task import Task
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.notification import NotificationLogRepository
from focusdesk.backend.repositories.task import TaskRepository
from focusdesk.backend.tasks.notifications import delivery_values
from focusdesk.telegram.services.notifications import NotificationResult, get_notification_service

logger = get_logger(__name__)


def deadline_text(task: Task) -> str:
    return (
        "⏰ <b>Deadline approaching</b>\n"
        f"Task: {escape(task.title)}\n"
        f"Due: {task.due_at:%Y-%m-%d %H:%M} UTC"
    )


def overdue_text(task: Task) -> str:
    return (
        "🔴 <b>Task overdue</b>\n"
        f"Task: {escape(task.title)}\n"
        f"Was due: {task.due_at:%Y-%m-%d %H:%M} UTC"
    )


async def _notify_each(
    session: AsyncSession,
    pairs: list[tuple[Task, User]],
    type: str,
    render,
) -> tuple[int, int]:
    """
    Log and send one notification per (task, assignee) pair.

    Every pair is committed on its own so a failure only affects that
    pair. Returns (sent, failed).
    """
    logs = NotificationLogRepository(session)
    service = get_notification_service()
    sent = failed = 0

    # Rendered up front: a rollback expires the loaded rows
    jobs = [
        (task.id, task.focus_id, user.id, user.tg_id, render(task))
        for task, user in pairs
    ]

    for task_id, focus_id, user_id, tg_id, text in jobs:
        try:
            log = await logs.create(
                user_id=user_id,
                type=type,
                payload={"task_id": task_id, "focus_id": focus_id},
                status=NotificationStatus.QUEUED.value,
            )
            try:
                result = await service.send(tg_id, text)
            except Exception as e:
                logger.error(
                    "Scheduled notification send raised",
                    extra={"task_id": task_id, "type": type, "error": str(e)},
                )
                result = NotificationResult(success=False, tg_id=tg_id, error=str(e))
            await logs.update(log, **delivery_values(result))
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            failed += 1
            logger.error(
                "Scheduled notification failed",
                extra={"task_id": task_id, "type": type, "error": str(e)},
            )
            continue

        if result.success:
            sent += 1
        else:
            failed += 1

    return sent, failed


def _summary(found: int, sent: int, failed: int) -> dict[str, Any]:
    return {
        "status": "completed",
        "found": found,
        "sent": sent,
        "failed": failed,
        "completed_at": utc_now().isoformat(),
    }


async def send_deadline_reminders(days: int | None = None) -> dict[str, Any]:
    """
    Remind assignees about open tasks due around ``days`` from now.

    The window is [now + (days - 1), now + (days + 1)] days.

    Args:
        days: Lead time; defaults to notifications.deadline_reminder_days

    Returns:
        Summary with found/sent/failed counts
    """
    if days is None:
        days = get_app_config().notifications.deadline_reminder_days

    now = utc_now()
    start = now + timedelta(days=days - 1)
    end = now + timedelta(days=days + 1)
    logger.info("Starting deadline reminders", extra={"days": days})

    async with get_session_factory()() as session:
        pairs = await TaskRepository(session).list_open_due_between(start, end)
        sent, failed = await _notify_each(
            session, pairs, NotificationType.DEADLINE_REMINDER.value, deadline_text
        )
        await session.commit()

    result = _summary(len(pairs), sent, failed)
    logger.info("Deadline reminders completed", extra=result)
    return result


async def send_overdue_alerts() -> dict[str, Any]:
    """Alert assignees about open tasks whose due date has passed."""
    logger.info("Starting overdue alerts")

    async with get_session_factory()() as session:
        pairs = await TaskRepository(session).list_open_overdue(utc_now())
        sent, failed = await _notify_each(
            session, pairs, NotificationType.OVERDUE_TASK.value, overdue_text
        )
        await session.commit()

    result = _summary(len(pairs), sent, failed)
    logger.info("Overdue alerts completed", extra=result)
    return result


# =============================================================================
# Task Registration
# =============================================================================


def get_scheduled_tasks() -> dict[str, dict[str, Any]]:
    """
    Scheduled task definitions for the enabled jobs.

    Each entry has:
        - function: The async function to execute
        - schedule: List of schedule configs (cron, args, kwargs)
        - retry_on_error: Whether to retry on failure
        - max_retries: Maximum retry attempts
    """
    config = get_app_config().notifications
    jobs = {
        "send_deadline_reminders": (send_deadline_reminders, config.deadline_reminders),
        "send_overdue_alerts": (send_overdue_alerts, config.overdue_alerts),
    }
    return {
        name: {
            "function": function,
            "schedule": [{"cron": job.cron}],
            "retry_on_error": False,
            "max_retries": 0,
        }
        for name, (function, job) in jobs.items()
        if job.enabled
    }


def register_scheduled_tasks() -> dict[str, Any]:
    """
    Register scheduled tasks with the broker.

    Must be called before starting the scheduler or worker.

    Returns:
        Dict mapping task names to registered task objects
    """
    from focusdesk.backend.tasks.broker import get_broker

    broker = get_broker()
    registered = {}

    for task_name, config in get_scheduled_tasks().items():
        registered[task_name] = broker.task(
            task_name=task_name,
            schedule=config["schedule"],
            retry_on_error=config["retry_on_error"],
            max_retries=config["max_retries"],
        )(config["function"])

        logger.debug(
            "Registered scheduled task",
            extra={"task_name": task_name, "schedule": config["schedule"]},
        )

    logger.info(
        "Scheduled tasks registered",
        extra={"task_count": len(registered), "tasks": list(registered.keys())},
    )
    return registered
