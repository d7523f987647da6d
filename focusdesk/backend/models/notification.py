"""
Notification Log Model.

Delivery record of every Telegram notification.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from focusdesk.backend.models.base import Base, CreatedAtMixin, UUIDMixin
from focusdesk.backend.models.enums import NotificationStatus


class NotificationLog(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "notification_logs"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        default=NotificationStatus.QUEUED.value,
        nullable=False,
        index=True,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
