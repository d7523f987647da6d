"""
Event Log Model.

Product analytics events recorded by services.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from focusdesk.backend.models.base import Base, CreatedAtMixin, UUIDMixin


class EventLog(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "event_logs"

    event_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Plain columns, not foreign keys: events outlive the rows they mention
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    focus_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    props: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
