"""
Assistant Repository.
"""

from typing import Any

from sqlalchemy import select

from focusdesk.backend.models.assistant import AssistantMessage, AssistantThread
from focusdesk.backend.repositories.base import BaseRepository


class AssistantRepository(BaseRepository[AssistantThread]):
    """Threads and their messages."""

    model = AssistantThread

    async def get_first_thread(self, focus_id: str) -> AssistantThread | None:
        """The oldest thread of a focus."""
        result = await self.session.execute(
            select(AssistantThread)
            .where(AssistantThread.focus_id == focus_id)
            .order_by(AssistantThread.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_messages(self, thread_id: str) -> list[AssistantMessage]:
        result = await self.session.execute(
            select(AssistantMessage)
            .where(AssistantMessage.thread_id == thread_id)
            .order_by(AssistantMessage.created_at.asc())
        )
        return list(result.scalars().all())

    async def recent_messages(self, thread_id: str, limit: int) -> list[AssistantMessage]:
        """Last ``limit`` messages in chronological order."""
        result = await self.session.execute(
            select(AssistantMessage)
            .where(AssistantMessage.thread_id == thread_id)
            .order_by(AssistantMessage.created_at.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def add_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        meta: dict[str, Any] | None = None,
    ) -> AssistantMessage:
        message = AssistantMessage(thread_id=thread_id, role=role, content=content, meta=meta)
        self.session.add(message)
        await self.session.flush()
        await self.session.refresh(message)
        return message
