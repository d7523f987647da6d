"""
CLI Commands.

Organized by domain/feature area.
"""

from focusdesk.cli.commands.assistant import app as assistant_app
from focusdesk.cli.commands.focus import app as focus_app
from focusdesk.cli.commands.health import app as health_app
from focusdesk.cli.commands.invite import app as invite_app
from focusdesk.cli.commands.task import app as task_app

__all__ = [
    "assistant_app",
    "focus_app",
    "health_app",
    "invite_app",
    "task_app",
]
