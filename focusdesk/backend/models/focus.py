"""
Focus Models.

A focus is a business project. Members hold a role within it.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusdesk.backend.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from focusdesk.backend.models.enums import FocusStatus, MemberRole

if TYPE_CHECKING:
    from focusdesk.backend.models.assistant import AssistantThread
    from focusdesk.backend.models.invite import Invite
    from focusdesk.backend.models.task import Task
    from focusdesk.backend.models.user import User


class Focus(UUIDMixin, TimestampMixin, Base):
    """Business project owned by one user and shared with members."""

    __tablename__ = "focuses"

    owner_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str | None] = mapped_column(String(255), nullable=True)
    deadline_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    success_metric: Mapped[str | None] = mapped_column(Text, nullable=True)
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    niche: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        default=FocusStatus.ACTIVE.value,
        nullable=False,
    )

    members: Mapped[list["FocusMember"]] = relationship(
        back_populates="focus",
        cascade="all, delete-orphan",
    )
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="focus",
        cascade="all, delete-orphan",
    )
    threads: Mapped[list["AssistantThread"]] = relationship(
        back_populates="focus",
        cascade="all, delete-orphan",
    )
    invites: Mapped[list["Invite"]] = relationship(
        back_populates="focus",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Focus(id={self.id}, title={self.title!r})>"


class FocusMember(UUIDMixin, CreatedAtMixin, Base):
    """Membership of a user in a focus."""

    __tablename__ = "focus_members"
    __table_args__ = (UniqueConstraint("focus_id", "user_id", name="uq_focus_member"),)

    focus_id: Mapped[str] = mapped_column(
        ForeignKey("focuses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(16),
        default=MemberRole.MEMBER.value,
        nullable=False,
    )

    focus: Mapped["Focus"] = relationship(back_populates="members")
    user: Mapped["User"] = relationship()

    @property
    def is_owner(self) -> bool:
        return self.role == MemberRole.OWNER.value
