"""
Domain Enumerations.

Stored as plain strings in the database; the enums are the single
source of allowed values for schemas and services.
"""

from enum import Enum


class FocusStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


class MemberRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELED = "canceled"


# Tasks in these states never receive reminders
CLOSED_TASK_STATUSES = (TaskStatus.DONE.value, TaskStatus.CANCELED.value)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"


class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    DEADLINE_REMINDER = "deadline_reminder"
    OVERDUE_TASK = "overdue_task"
