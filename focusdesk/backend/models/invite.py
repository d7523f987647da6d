"""
Invite Model.

Shareable code that grants membership in a focus.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusdesk.backend.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from focusdesk.backend.models.focus import Focus


class Invite(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "invites"

    focus_id: Mapped[str] = mapped_column(
        ForeignKey("focuses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    max_uses: Mapped[int | None] = mapped_column(nullable=True)
    use_count: Mapped[int] = mapped_column(default=0, nullable=False)

    focus: Mapped["Focus"] = relationship(back_populates="invites")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.use_count >= self.max_uses
