"""
Task Repository.

Data access for tasks, subtasks and comments.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from focusdesk.backend.models.enums import CLOSED_TASK_STATUSES
from focusdesk.backend.models.task import SubTask, Task, TaskComment
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.base import BaseRepository


def _task_loader_options() -> tuple:
    return (
        selectinload(Task.subtasks),
        selectinload(Task.comments).selectinload(TaskComment.author),
    )


class TaskRepository(BaseRepository[Task]):
    """Repository for Task and its children."""

    model = Task

    async def get_full(self, task_id: str) -> Task | None:
        """Task with subtasks and comments, refreshed from the database."""
        result = await self.session.execute(
            select(Task)
            .where(Task.id == task_id)
            .options(*_task_loader_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_focus(
        self,
        focus_id: str,
        assigned_to_user_id: str | None = None,
        status: str | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        """
        List tasks of a focus.

        Ordered by due date ascending with undated tasks last, then
        newest first.
        """
        query = select(Task).where(Task.focus_id == focus_id)
        if assigned_to_user_id is not None:
            query = query.where(Task.assigned_to_user_id == assigned_to_user_id)
        if status is not None:
            query = query.where(Task.status == status)
        if priority is not None:
            query = query.where(Task.priority == priority)

        result = await self.session.execute(
            query.options(*_task_loader_options()).order_by(
                Task.due_at.asc().nulls_last(),
                Task.created_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def list_open_due_between(
        self,
        start: datetime,
        end: datetime,
    ) -> list[tuple[Task, User]]:
        """Open tasks due in [start, end] whose assignee has a Telegram id."""
        result = await self.session.execute(
            select(Task, User)
            .join(User, User.id == Task.assigned_to_user_id)
            .where(
                Task.due_at >= start,
                Task.due_at <= end,
                Task.status.not_in(CLOSED_TASK_STATUSES),
                User.tg_id.is_not(None),
            )
            .order_by(Task.due_at.asc())
        )
        return [(task, user) for task, user in result.all()]

    async def list_open_overdue(self, now: datetime) -> list[tuple[Task, User]]:
        """Open tasks due before now whose assignee has a Telegram id."""
        result = await self.session.execute(
            select(Task, User)
            .join(User, User.id == Task.assigned_to_user_id)
            .where(
                Task.due_at < now,
                Task.status.not_in(CLOSED_TASK_STATUSES),
                User.tg_id.is_not(None),
            )
            .order_by(Task.due_at.asc())
        )
        return [(task, user) for task, user in result.all()]


class SubTaskRepository(BaseRepository[SubTask]):
    model = SubTask


class CommentRepository(BaseRepository[TaskComment]):
    model = TaskComment

    async def get_with_author(self, comment_id: str) -> TaskComment | None:
        result = await self.session.execute(
            select(TaskComment)
            .where(TaskComment.id == comment_id)
            .options(selectinload(TaskComment.author))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
