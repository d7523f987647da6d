"""
Task Models.

Tasks belong to a focus and carry subtasks and comments.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusdesk.backend.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from focusdesk.backend.models.enums import TaskPriority, TaskStatus

if TYPE_CHECKING:
    from focusdesk.backend.models.focus import Focus
    from focusdesk.backend.models.user import User


class Task(UUIDMixin, TimestampMixin, Base):
    """A unit of work inside a focus, optionally assigned to a member."""

    __tablename__ = "tasks"

    focus_id: Mapped[str] = mapped_column(
        ForeignKey("focuses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_to_user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(
        String(16),
        default=TaskPriority.MEDIUM.value,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(16),
        default=TaskStatus.TODO.value,
        nullable=False,
        index=True,
    )
    due_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    focus: Mapped["Focus"] = relationship(back_populates="tasks")
    assignee: Mapped["User | None"] = relationship(foreign_keys=[assigned_to_user_id])
    subtasks: Mapped[list["SubTask"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="SubTask.created_at",
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.created_at",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, status={self.status})>"


class SubTask(UUIDMixin, CreatedAtMixin, Base):
    """Checklist item of a task."""

    __tablename__ = "subtasks"

    task_id: Mapped[str] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    is_done: Mapped[bool] = mapped_column(default=False, nullable=False)

    task: Mapped["Task"] = relationship(back_populates="subtasks")


class TaskComment(UUIDMixin, CreatedAtMixin, Base):
    """Comment left on a task by a focus member."""

    __tablename__ = "task_comments"

    task_id: Mapped[str] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)

    task: Mapped["Task"] = relationship(back_populates="comments")
    author: Mapped["User"] = relationship()
