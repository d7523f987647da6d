"""
Focus Schemas.

Pydantic schemas for focus (project) request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from focusdesk.backend.models.enums import FocusStatus, MemberRole
from focusdesk.backend.schemas.base import ORMModel, naive_datetime
from focusdesk.backend.schemas.user import UserSummary


class FocusCreate(BaseModel):
    """Schema for creating a focus."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Project title",
        examples=["Coffee shop launch"],
    )
    description: str | None = Field(default=None, max_length=10000)
    stage: str | None = Field(default=None, max_length=255, examples=["idea"])
    deadline_at: datetime | None = None
    success_metric: str | None = Field(default=None, max_length=2000)
    budget: float | None = None
    niche: str | None = Field(default=None, max_length=255)

    normalize_deadline = field_validator("deadline_at")(naive_datetime)


class FocusUpdate(BaseModel):
    """Schema for a partial focus update. Only sent fields change."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    stage: str | None = Field(default=None, max_length=255)
    deadline_at: datetime | None = None
    success_metric: str | None = Field(default=None, max_length=2000)
    budget: float | None = None
    niche: str | None = Field(default=None, max_length=255)
    status: FocusStatus | None = None

    normalize_deadline = field_validator("deadline_at")(naive_datetime)


class FocusResponse(ORMModel):
    """Focus as listed for a member."""

    id: str
    owner_user_id: str
    title: str
    description: str | None = None
    stage: str | None = None
    deadline_at: datetime | None = None
    success_metric: str | None = None
    budget: float | None = None
    niche: str | None = None
    status: FocusStatus
    created_at: datetime
    updated_at: datetime
    role: MemberRole | None = Field(default=None, description="Caller's role in the focus")
    task_count: int = 0
    member_count: int = 0


class MemberResponse(ORMModel):
    id: str
    user_id: str
    role: MemberRole
    user: UserSummary | None = None


class FocusDetail(FocusResponse):
    """Focus with its members."""

    members: list[MemberResponse] = Field(default_factory=list)
