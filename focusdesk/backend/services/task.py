"""
Task Service.

Business logic for tasks, subtasks and comments.

Permission rules:
    - reading and commenting: any member of the focus
    - create, delete, bulk create: owner
    - update: owner (all fields) or the assignee (status, due_at,
      description only; other fields are ignored)
    - subtask create/update: owner or assignee; subtask delete: owner
"""

from html import escape

from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.exceptions import NotAssigneeError, NotFoundError, ValidationError
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.enums import NotificationType, TaskStatus
from focusdesk.backend.models.focus import FocusMember
from focusdesk.backend.models.task import SubTask, Task
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.task import (
    CommentRepository,
    SubTaskRepository,
    TaskRepository,
)
from focusdesk.backend.repositories.user import UserRepository
from focusdesk.backend.schemas.task import (
    CommentCreate,
    SubTaskCreate,
    SubTaskUpdate,
    TaskCreate,
    TaskUpdate,
)
from focusdesk.backend.services import subscription
from focusdesk.backend.services.base import FocusScopedService
from focusdesk.backend.services.events import record_event
from focusdesk.backend.services.notifications import NotificationDispatcher

ASSIGNEE_EDITABLE_FIELDS = frozenset({"status", "due_at", "description"})


def apply_status(task: Task, status: str) -> None:
    """Set status; completed_at follows it (set on done, cleared otherwise)."""
    task.status = status
    task.completed_at = utc_now() if status == TaskStatus.DONE.value else None


def assignment_text(task: Task, focus_title: str) -> str:
    lines = [
        "📌 <b>New task assigned to you</b>",
        f"Project: {escape(focus_title)}",
        f"Task: {escape(task.title)}",
    ]
    if task.due_at:
        lines.append(f"Due: {task.due_at:%Y-%m-%d %H:%M} UTC")
    return "\n".join(lines)


class TaskService(FocusScopedService):
    """Service for task business logic."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        super().__init__(session)
        self.tasks = TaskRepository(session)
        self.subtasks = SubTaskRepository(session)
        self.comments = CommentRepository(session)
        self.users = UserRepository(session)
        self.notifier = notifier or NotificationDispatcher(session)

    async def _get_task(self, task_id: str) -> Task:
        task = await self.tasks.get_by_id_or_none(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def _require_assignee_member(self, focus_id: str, user_id: str | None) -> None:
        """An assignee, when given, must be a member of the focus."""
        if user_id is None:
            return
        if await self.focuses.get_member(focus_id, user_id) is None:
            raise ValidationError(
                "Assignee must be a member of the project",
                details={"assigned_to_user_id": user_id},
            )

    async def _notify_assignment(self, task: Task, actor: User) -> None:
        if not task.assigned_to_user_id or task.assigned_to_user_id == actor.id:
            return
        assignee = await self.users.get_by_id_or_none(task.assigned_to_user_id)
        if assignee is None:
            return
        focus = await self.focuses.get_by_id(task.focus_id)
        await self.notifier.enqueue(
            assignee,
            NotificationType.TASK_ASSIGNED.value,
            assignment_text(task, focus.title),
            payload={"task_id": task.id, "focus_id": task.focus_id},
        )

    async def _reload(self, task_id: str) -> Task:
        task = await self.tasks.get_full(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def list_tasks(
        self,
        user: User,
        focus_id: str,
        assigned: str = "me",
        status: TaskStatus | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        """
        List tasks of a focus.

        ``assigned="me"`` (the default) returns only the caller's tasks.
        """
        await self._require_member(focus_id, user.id)
        return await self.tasks.list_for_focus(
            focus_id,
            assigned_to_user_id=user.id if assigned != "all" else None,
            status=status.value if status else None,
            priority=priority,
        )

    async def create_task(self, user: User, focus_id: str, data: TaskCreate) -> Task:
        subscription.ensure_active(user)
        await self._require_owner(focus_id, user.id)
        await self._require_assignee_member(focus_id, data.assigned_to_user_id)

        self._log_operation("Creating task", focus_id=focus_id, title=data.title)
        task = Task(
            focus_id=focus_id,
            created_by_user_id=user.id,
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            due_at=data.due_at,
            assigned_to_user_id=data.assigned_to_user_id,
        )
        apply_status(task, data.status.value)
        self.session.add(task)
        await self._execute_db_operation("create_task", self.session.flush())

        await record_event(
            self.session, "create_task", user_id=user.id, focus_id=focus_id, props={"task_id": task.id}
        )
        await self._notify_assignment(task, user)
        return await self._reload(task.id)

    async def create_many(self, user: User, focus_id: str, items: list) -> list[Task]:
        """
        Create several tasks with their subtasks in one transaction.

        Used by the assistant's plan-to-tasks flow. Caller must have
        checked ownership and activity.
        """
        for item in items:
            await self._require_assignee_member(focus_id, item.assigned_to_user_id)

        created: list[Task] = []
        for item in items:
            task = Task(
                focus_id=focus_id,
                created_by_user_id=user.id,
                title=item.title,
                description=item.description,
                priority=item.priority.value,
                due_at=item.due_at,
                assigned_to_user_id=item.assigned_to_user_id,
            )
            apply_status(task, item.status.value)
            task.subtasks = [SubTask(title=sub.title) for sub in item.subtasks]
            self.session.add(task)
            created.append(task)

        await self._execute_db_operation("create_tasks", self.session.flush())
        for task in created:
            await self._notify_assignment(task, user)

        await record_event(
            self.session,
            "bulk_tasks_created",
            user_id=user.id,
            focus_id=focus_id,
            props={"count": len(created)},
        )
        return [await self._reload(task.id) for task in created]

    async def update_task(self, user: User, task_id: str, data: TaskUpdate) -> Task:
        """
        Update a task.

        Raises:
            NotAssigneeError: When a non-owner edits someone else's task
            ValidationError: When the new assignee is not a member
        """
        subscription.ensure_active(user)
        task = await self._get_task(task_id)
        member = await self._require_member(task.focus_id, user.id)

        update_data = data.model_dump(exclude_unset=True)

        if not member.is_owner:
            if task.assigned_to_user_id != user.id:
                raise NotAssigneeError()
            ignored = sorted(set(update_data) - ASSIGNEE_EDITABLE_FIELDS)
            if ignored:
                self._log_debug("Ignoring fields in assignee update", task_id=task_id, fields=ignored)
            update_data = {k: v for k, v in update_data.items() if k in ASSIGNEE_EDITABLE_FIELDS}

        previous_assignee = task.assigned_to_user_id
        if "assigned_to_user_id" in update_data:
            await self._require_assignee_member(task.focus_id, update_data["assigned_to_user_id"])

        for field in ("title", "priority", "status"):
            # required columns; an explicit null leaves them unchanged
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        status = update_data.pop("status", None)
        if "priority" in update_data:
            update_data["priority"] = update_data["priority"].value

        self._log_operation("Updating task", task_id=task_id, fields=sorted(update_data) + (["status"] if status else []))
        for key, value in update_data.items():
            setattr(task, key, value)
        if status is not None:
            apply_status(task, status.value)

        await self._execute_db_operation("update_task", self.session.flush())
        await record_event(
            self.session, "update_task", user_id=user.id, focus_id=task.focus_id, props={"task_id": task.id}
        )

        if task.assigned_to_user_id != previous_assignee:
            await self._notify_assignment(task, user)

        return await self._reload(task.id)

    async def delete_task(self, user: User, task_id: str) -> None:
        task = await self._get_task(task_id)
        await self._require_owner(task.focus_id, user.id)

        self._log_operation("Deleting task", task_id=task_id)
        await self._execute_db_operation("delete_task", self.tasks.delete(task))
        await record_event(
            self.session, "delete_task", user_id=user.id, focus_id=task.focus_id, props={"task_id": task_id}
        )

    async def add_comment(self, user: User, task_id: str, data: CommentCreate):
        task = await self._get_task(task_id)
        await self._require_member(task.focus_id, user.id)

        comment = await self._execute_db_operation(
            "add_comment",
            self.comments.create(task_id=task.id, author_user_id=user.id, text=data.text),
        )
        return await self.comments.get_with_author(comment.id)

    async def _require_owner_or_assignee(self, task: Task, user: User) -> FocusMember:
        member = await self._require_member(task.focus_id, user.id)
        if not member.is_owner and task.assigned_to_user_id != user.id:
            raise NotAssigneeError()
        return member

    async def add_subtask(self, user: User, task_id: str, data: SubTaskCreate) -> SubTask:
        task = await self._get_task(task_id)
        await self._require_owner_or_assignee(task, user)
        return await self._execute_db_operation(
            "add_subtask",
            self.subtasks.create(task_id=task.id, title=data.title),
        )

    async def update_subtask(self, user: User, subtask_id: str, data: SubTaskUpdate) -> SubTask:
        subtask = await self.subtasks.get_by_id(subtask_id)
        task = await self._get_task(subtask.task_id)
        await self._require_owner_or_assignee(task, user)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if changes:
            await self._execute_db_operation("update_subtask", self.subtasks.update(subtask, **changes))
        return subtask

    async def delete_subtask(self, user: User, subtask_id: str) -> None:
        subtask = await self.subtasks.get_by_id(subtask_id)
        task = await self._get_task(subtask.task_id)
        await self._require_owner(task.focus_id, user.id)
        await self._execute_db_operation("delete_subtask", self.subtasks.delete(subtask))
