"""
Invite API Endpoints.

Owners manage invites under a focus; redeeming works by code for any
authenticated user.
"""

from fastapi import APIRouter, Response

from focusdesk.backend.core.dependencies import CurrentUser, DbSession
from focusdesk.backend.schemas.base import ApiResponse
from focusdesk.backend.schemas.invite import (
    InviteCreate,
    InvitePreview,
    InviteResponse,
    MembershipResponse,
)
from focusdesk.backend.services.invite import InviteService

router = APIRouter()


@router.post(
    "/focuses/{focus_id}/invites",
    response_model=ApiResponse[InviteResponse],
    status_code=201,
    summary="Create an invite",
)
async def create_invite(
    focus_id: str,
    db: DbSession,
    user: CurrentUser,
    data: InviteCreate | None = None,
) -> ApiResponse[InviteResponse]:
    invite = await InviteService(db).create_invite(user, focus_id, data or InviteCreate())
    return ApiResponse(data=InviteResponse.model_validate(invite))


@router.get(
    "/focuses/{focus_id}/invites",
    response_model=ApiResponse[list[InviteResponse]],
    summary="List invites of a focus",
)
async def list_invites(
    focus_id: str,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[list[InviteResponse]]:
    invites = await InviteService(db).list_invites(user, focus_id)
    return ApiResponse(data=[InviteResponse.model_validate(i) for i in invites])


@router.get(
    "/invites/{code}",
    response_model=ApiResponse[InvitePreview],
    summary="Preview an invite",
)
async def preview_invite(code: str, db: DbSession, user: CurrentUser) -> ApiResponse[InvitePreview]:
    return ApiResponse(data=await InviteService(db).preview(code))


@router.post(
    "/invites/{code}/accept",
    response_model=ApiResponse[MembershipResponse],
    summary="Accept an invite",
    description="Join the focus as a member. Existing members get their membership back.",
)
async def accept_invite(
    code: str,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[MembershipResponse]:
    member = await InviteService(db).accept(user, code)
    return ApiResponse(data=MembershipResponse.model_validate(member))


@router.delete(
    "/invites/{invite_id}",
    status_code=204,
    response_class=Response,
    summary="Revoke an invite",
)
async def revoke_invite(invite_id: str, db: DbSession, user: CurrentUser) -> None:
    await InviteService(db).revoke(user, invite_id)
