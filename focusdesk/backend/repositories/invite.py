"""
Invite Repository.
"""

from sqlalchemy import select

from focusdesk.backend.models.invite import Invite
from focusdesk.backend.repositories.base import BaseRepository


class InviteRepository(BaseRepository[Invite]):
    model = Invite

    async def get_by_code(self, code: str, for_update: bool = False) -> Invite | None:
        """Look up an invite; ``for_update`` locks the row until commit."""
        query = select(Invite).where(Invite.code == code)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_focus(self, focus_id: str) -> list[Invite]:
        result = await self.session.execute(
            select(Invite)
            .where(Invite.focus_id == focus_id)
            .order_by(Invite.created_at.desc())
        )
        return list(result.scalars().all())
