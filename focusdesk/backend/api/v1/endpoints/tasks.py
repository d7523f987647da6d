"""
Task API Endpoints.

Tasks live under a focus for listing and creation, and are addressed
directly by id for everything else.
"""

from fastapi import APIRouter, Query, Response

from focusdesk.backend.core.dependencies import CurrentUser, DbSession, Notifier
from focusdesk.backend.models.enums import TaskPriority, TaskStatus
from focusdesk.backend.schemas.base import ApiResponse
from focusdesk.backend.schemas.task import (
    AssignedFilter,
    CommentCreate,
    CommentResponse,
    SubTaskCreate,
    SubTaskResponse,
    SubTaskUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from focusdesk.backend.services.task import TaskService

router = APIRouter()


@router.get(
    "/focuses/{focus_id}/tasks",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List tasks of a focus",
    description="By default only tasks assigned to the caller are returned.",
)
async def list_tasks(
    focus_id: str,
    db: DbSession,
    user: CurrentUser,
    assigned: AssignedFilter = Query(default="me", description="'me' or 'all'"),
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
) -> ApiResponse[list[TaskResponse]]:
    tasks = await TaskService(db).list_tasks(
        user,
        focus_id,
        assigned=assigned,
        status=status,
        priority=priority.value if priority else None,
    )
    return ApiResponse(data=[TaskResponse.model_validate(t) for t in tasks])


@router.post(
    "/focuses/{focus_id}/tasks",
    response_model=ApiResponse[TaskResponse],
    status_code=201,
    summary="Create a task",
    description="Owner only. Notifies the assignee when it is not the creator.",
)
async def create_task(
    focus_id: str,
    data: TaskCreate,
    db: DbSession,
    user: CurrentUser,
    notifier: Notifier,
) -> ApiResponse[TaskResponse]:
    task = await TaskService(db, notifier).create_task(user, focus_id, data)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.patch(
    "/tasks/{task_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Update a task",
    description="Owners may change every field; the assignee only status, due_at and description.",
)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    db: DbSession,
    user: CurrentUser,
    notifier: Notifier,
) -> ApiResponse[TaskResponse]:
    task = await TaskService(db, notifier).update_task(user, task_id, data)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.delete(
    "/tasks/{task_id}",
    status_code=204,
    response_class=Response,
    summary="Delete a task",
)
async def delete_task(task_id: str, db: DbSession, user: CurrentUser) -> None:
    await TaskService(db).delete_task(user, task_id)


@router.post(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=201,
    summary="Comment on a task",
)
async def add_comment(
    task_id: str,
    data: CommentCreate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[CommentResponse]:
    comment = await TaskService(db).add_comment(user, task_id, data)
    return ApiResponse(data=CommentResponse.model_validate(comment))


@router.post(
    "/tasks/{task_id}/subtasks",
    response_model=ApiResponse[SubTaskResponse],
    status_code=201,
    summary="Add a subtask",
)
async def add_subtask(
    task_id: str,
    data: SubTaskCreate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[SubTaskResponse]:
    subtask = await TaskService(db).add_subtask(user, task_id, data)
    return ApiResponse(data=SubTaskResponse.model_validate(subtask))


@router.patch(
    "/subtasks/{subtask_id}",
    response_model=ApiResponse[SubTaskResponse],
    summary="Update a subtask",
)
async def update_subtask(
    subtask_id: str,
    data: SubTaskUpdate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[SubTaskResponse]:
    subtask = await TaskService(db).update_subtask(user, subtask_id, data)
    return ApiResponse(data=SubTaskResponse.model_validate(subtask))


@router.delete(
    "/subtasks/{subtask_id}",
    status_code=204,
    response_class=Response,
    summary="Delete a subtask",
)
async def delete_subtask(subtask_id: str, db: DbSession, user: CurrentUser) -> None:
    await TaskService(db).delete_subtask(user, subtask_id)
