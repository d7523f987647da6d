"""
Current User Endpoints.
"""

from fastapi import APIRouter

from focusdesk.backend.core.dependencies import CurrentUser
from focusdesk.backend.schemas.base import ApiResponse
from focusdesk.backend.schemas.user import SubscriptionStatus, UserResponse
from focusdesk.backend.services import subscription

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[UserResponse],
    summary="Get the current user",
)
async def get_me(user: CurrentUser) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(user))


@router.get(
    "/subscription",
    response_model=ApiResponse[SubscriptionStatus],
    summary="Get trial and subscription status",
)
async def get_subscription(user: CurrentUser) -> ApiResponse[SubscriptionStatus]:
    return ApiResponse(data=subscription.subscription_status(user))
