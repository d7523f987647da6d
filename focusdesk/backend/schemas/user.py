"""
User Schemas.
"""

from datetime import datetime

from pydantic import Field

from focusdesk.backend.schemas.base import ORMModel


class UserSummary(ORMModel):
    """Compact user shown inside members and comments."""

    id: str
    tg_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class UserResponse(UserSummary):
    """Current user."""

    language_code: str | None = None
    trial_started_at: datetime | None = None
    subscription_until: datetime | None = None
    created_at: datetime


class SubscriptionStatus(ORMModel):
    """Trial and subscription state of the current user."""

    active: bool = Field(description="Whether paid actions are allowed")
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None
    subscription_until: datetime | None = None
