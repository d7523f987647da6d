"""
Invite Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from focusdesk.backend.models.enums import MemberRole
from focusdesk.backend.schemas.base import ORMModel


class InviteCreate(BaseModel):
    """Invite options. Missing values fall back to notifications.yaml defaults."""

    expires_in_hours: int | None = Field(default=None, ge=1, le=24 * 90)
    max_uses: int | None = Field(default=None, ge=1, le=1000)


class InviteResponse(ORMModel):
    id: str
    focus_id: str
    created_by_user_id: str
    code: str
    expires_at: datetime | None = None
    max_uses: int | None = None
    use_count: int
    created_at: datetime


class InvitePreview(BaseModel):
    code: str
    focus_id: str
    focus_title: str
    expires_at: datetime | None = None
    valid: bool


class MembershipResponse(ORMModel):
    id: str
    focus_id: str
    user_id: str
    role: MemberRole
    created_at: datetime
