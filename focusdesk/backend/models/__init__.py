# Database models package. Importing it registers every table on Base.metadata.
from focusdesk.backend.models.assistant import AssistantMessage, AssistantThread
from focusdesk.backend.models.base import Base
from focusdesk.backend.models.event import EventLog
from focusdesk.backend.models.focus import Focus, FocusMember
from focusdesk.backend.models.invite import Invite
from focusdesk.backend.models.notification import NotificationLog
from focusdesk.backend.models.task import SubTask, Task, TaskComment
from focusdesk.backend.models.user import User

__all__ = [
    "AssistantMessage",
    "AssistantThread",
    "Base",
    "EventLog",
    "Focus",
    "FocusMember",
    "Invite",
    "NotificationLog",
    "SubTask",
    "Task",
    "TaskComment",
    "User",
]
