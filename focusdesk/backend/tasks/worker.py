"""
Worker Entrypoint.

Module imported by ``taskiq worker`` and ``taskiq scheduler``. Importing
it registers every task with the broker.

    taskiq worker focusdesk.backend.tasks.worker:broker
    taskiq scheduler focusdesk.backend.tasks.worker:scheduler
"""

from focusdesk.backend.core.logging import setup_logging
from focusdesk.backend.tasks.broker import get_broker
from focusdesk.backend.tasks.notifications import register_tasks
from focusdesk.backend.tasks.scheduled import register_scheduled_tasks
from focusdesk.backend.tasks.scheduler import get_scheduler

setup_logging()

broker = get_broker()
register_tasks()
register_scheduled_tasks()
scheduler = get_scheduler()
