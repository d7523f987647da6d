"""
Task Schemas.

Pydantic schemas for tasks, subtasks and comments.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from focusdesk.backend.models.enums import TaskPriority, TaskStatus
from focusdesk.backend.schemas.base import ORMModel, naive_datetime
from focusdesk.backend.schemas.user import UserSummary

AssignedFilter = Literal["me", "all"]


class SubTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class SubTaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    is_done: bool | None = None


class SubTaskResponse(ORMModel):
    id: str
    task_id: str
    title: str
    is_done: bool
    created_at: datetime


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)


class CommentResponse(ORMModel):
    id: str
    task_id: str
    author_user_id: str
    text: str
    created_at: datetime
    author: UserSummary | None = None


class TaskCreate(BaseModel):
    """Schema for creating a task."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Task title",
        examples=["Call three suppliers"],
    )
    description: str | None = Field(default=None, max_length=10000)
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_at: datetime | None = None
    assigned_to_user_id: str | None = None

    normalize_due = field_validator("due_at")(naive_datetime)


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Owners may send any field. Assignees who are not owners may only
    change status, due_at and description; other fields are ignored.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_at: datetime | None = None
    assigned_to_user_id: str | None = None

    normalize_due = field_validator("due_at")(naive_datetime)


class TaskResponse(ORMModel):
    """Task with its subtasks and comments."""

    id: str
    focus_id: str
    created_by_user_id: str
    assigned_to_user_id: str | None = None
    title: str
    description: str | None = None
    priority: TaskPriority
    status: TaskStatus
    due_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    subtasks: list[SubTaskResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
