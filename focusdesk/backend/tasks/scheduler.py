"""
Task Scheduler Configuration.

TaskiqScheduler with LabelScheduleSource: schedules come from the
``schedule`` label of each registered task.

Usage:
    python cli.py --service scheduler

    # Or directly with taskiq
    taskiq scheduler focusdesk.backend.tasks.worker:scheduler

Important:
    Run only ONE scheduler instance. Multiple instances will cause
    duplicate reminders.
"""

from typing import TYPE_CHECKING

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from taskiq import TaskiqScheduler


def create_scheduler() -> "TaskiqScheduler":
    from taskiq import TaskiqScheduler
    from taskiq.schedule_sources import LabelScheduleSource

    from focusdesk.backend.tasks.broker import get_broker

    broker = get_broker()
    scheduler = TaskiqScheduler(broker=broker, sources=[LabelScheduleSource(broker)])

    logger.info("Taskiq scheduler configured with LabelScheduleSource")
    return scheduler


_scheduler: "TaskiqScheduler | None" = None


def get_scheduler() -> "TaskiqScheduler":
    global _scheduler
    if _scheduler is None:
        _scheduler = create_scheduler()
    return _scheduler
