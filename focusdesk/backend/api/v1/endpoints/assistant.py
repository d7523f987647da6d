"""
Assistant API Endpoints.

Per-focus chat thread with the business assistant.
"""

from fastapi import APIRouter

from focusdesk.backend.core.dependencies import AssistantGateway, CurrentUser, DbSession, Notifier
from focusdesk.backend.schemas.assistant import (
    AssistantMessageResponse,
    AssistantThreadResponse,
    MessageCreate,
    PlanToTasksRequest,
    ThreadWithMessages,
)
from focusdesk.backend.schemas.base import ApiResponse
from focusdesk.backend.schemas.task import TaskResponse
from focusdesk.backend.services.assistant import AssistantService
from focusdesk.backend.services.task import TaskService

router = APIRouter()


@router.get(
    "/thread",
    response_model=ApiResponse[ThreadWithMessages],
    summary="Get the assistant thread",
    description="Oldest thread of the focus with its messages in chronological order.",
)
async def get_thread(
    focus_id: str,
    db: DbSession,
    user: CurrentUser,
    gateway: AssistantGateway,
) -> ApiResponse[ThreadWithMessages]:
    thread, messages = await AssistantService(db, gateway).get_thread(user, focus_id)
    return ApiResponse(
        data=ThreadWithMessages(
            thread=AssistantThreadResponse.model_validate(thread) if thread else None,
            messages=[AssistantMessageResponse.model_validate(m) for m in messages],
        )
    )


@router.post(
    "/message",
    response_model=ApiResponse[AssistantMessageResponse],
    summary="Send a message to the assistant",
    description="Stores the question, asks the assistant and returns its stored answer.",
)
async def send_message(
    focus_id: str,
    data: MessageCreate,
    db: DbSession,
    user: CurrentUser,
    gateway: AssistantGateway,
) -> ApiResponse[AssistantMessageResponse]:
    message = await AssistantService(db, gateway).send_message(user, focus_id, data.content)
    return ApiResponse(data=AssistantMessageResponse.model_validate(message))


@router.post(
    "/plan_to_tasks",
    response_model=ApiResponse[list[TaskResponse]],
    status_code=201,
    summary="Create tasks from an accepted plan",
    description="Owner only. All tasks are created or none.",
)
async def plan_to_tasks(
    focus_id: str,
    data: PlanToTasksRequest,
    db: DbSession,
    user: CurrentUser,
    gateway: AssistantGateway,
    notifier: Notifier,
) -> ApiResponse[list[TaskResponse]]:
    service = AssistantService(db, gateway, TaskService(db, notifier))
    tasks = await service.plan_to_tasks(user, focus_id, data)
    return ApiResponse(data=[TaskResponse.model_validate(t) for t in tasks])
