"""
Focus API Endpoints.

Projects the current user belongs to, and their members.
"""

from fastapi import APIRouter, Response

from focusdesk.backend.core.dependencies import CurrentUser, DbSession
from focusdesk.backend.schemas.base import ApiResponse
from focusdesk.backend.schemas.focus import (
    FocusCreate,
    FocusDetail,
    FocusResponse,
    FocusUpdate,
)
from focusdesk.backend.services.focus import FocusService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[FocusResponse]],
    summary="List my focuses",
    description="Focuses the user is a member of, most recently updated first.",
)
async def list_focuses(db: DbSession, user: CurrentUser) -> ApiResponse[list[FocusResponse]]:
    focuses = await FocusService(db).list_focuses(user)
    return ApiResponse(data=focuses)


@router.post(
    "",
    response_model=ApiResponse[FocusResponse],
    status_code=201,
    summary="Create a focus",
    description="Create a focus owned by the caller. Starts the trial on first use.",
)
async def create_focus(
    data: FocusCreate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[FocusResponse]:
    focus = await FocusService(db).create_focus(user, data)
    return ApiResponse(data=focus)


@router.get(
    "/{focus_id}",
    response_model=ApiResponse[FocusDetail],
    summary="Get a focus with its members",
)
async def get_focus(focus_id: str, db: DbSession, user: CurrentUser) -> ApiResponse[FocusDetail]:
    focus = await FocusService(db).get_focus(user, focus_id)
    return ApiResponse(data=focus)


@router.patch(
    "/{focus_id}",
    response_model=ApiResponse[FocusResponse],
    summary="Update a focus",
    description="Partial update. Owner only.",
)
async def update_focus(
    focus_id: str,
    data: FocusUpdate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[FocusResponse]:
    focus = await FocusService(db).update_focus(user, focus_id, data)
    return ApiResponse(data=focus)


@router.delete(
    "/{focus_id}",
    status_code=204,
    response_class=Response,
    summary="Delete a focus",
)
async def delete_focus(focus_id: str, db: DbSession, user: CurrentUser) -> None:
    await FocusService(db).delete_focus(user, focus_id)


@router.delete(
    "/{focus_id}/members/{member_user_id}",
    status_code=204,
    response_class=Response,
    summary="Remove a member",
    description="Owner only. The owner cannot be removed.",
)
async def remove_member(
    focus_id: str,
    member_user_id: str,
    db: DbSession,
    user: CurrentUser,
) -> None:
    await FocusService(db).remove_member(user, focus_id, member_user_id)
