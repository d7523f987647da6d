"""
Assistant Schemas.

Chat messages, suggested tasks and the plan-to-tasks request.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from focusdesk.backend.models.enums import TaskPriority, TaskStatus
from focusdesk.backend.schemas.base import ORMModel, naive_datetime
from focusdesk.backend.schemas.task import SubTaskCreate


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=8000)


class AssistantMessageResponse(ORMModel):
    id: str
    thread_id: str
    role: str
    content: str
    meta: dict[str, Any] | None = None
    created_at: datetime


class AssistantThreadResponse(ORMModel):
    id: str
    focus_id: str
    created_at: datetime


class ThreadWithMessages(BaseModel):
    """Thread of a focus; both parts are empty when no thread exists."""

    thread: AssistantThreadResponse | None = None
    messages: list[AssistantMessageResponse] = Field(default_factory=list)


class PlanTask(BaseModel):
    """One task of a plan accepted from the assistant."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_at: datetime | None = None
    assigned_to_user_id: str | None = None
    subtasks: list[SubTaskCreate] = Field(default_factory=list)

    normalize_due = field_validator("due_at")(naive_datetime)


class PlanToTasksRequest(BaseModel):
    tasks: list[PlanTask] = Field(..., min_length=1, max_length=50)
