"""
Assistant Models.

Chat threads with the business assistant, one per focus.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusdesk.backend.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from focusdesk.backend.models.focus import Focus


class AssistantThread(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "assistant_threads"

    focus_id: Mapped[str] = mapped_column(
        ForeignKey("focuses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    focus: Mapped["Focus"] = relationship(back_populates="threads")
    messages: Mapped[list["AssistantMessage"]] = relationship(
        back_populates="thread",
        cascade="all, delete-orphan",
    )


class AssistantMessage(UUIDMixin, CreatedAtMixin, Base):
    """
    One message of a thread.

    Assistant replies keep their parsed suggestions in ``meta``:
    ``{"kind": "ai_response", "suggested_tasks": [...], "followup_questions": [...]}``.
    """

    __tablename__ = "assistant_messages"

    thread_id: Mapped[str] = mapped_column(
        ForeignKey("assistant_threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    meta: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    thread: Mapped["AssistantThread"] = relationship(back_populates="messages")
