"""
Focus Repository.

Data access for focuses and their memberships.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from focusdesk.backend.models.focus import Focus, FocusMember
from focusdesk.backend.models.task import Task
from focusdesk.backend.repositories.base import BaseRepository


class FocusRepository(BaseRepository[Focus]):
    """
    Repository for Focus and FocusMember.

    Membership lookups are always by (focus_id, user_id).
    """

    model = Focus

    async def get_with_members(self, focus_id: str) -> Focus | None:
        result = await self.session.execute(
            select(Focus)
            .where(Focus.id == focus_id)
            .options(selectinload(Focus.members).selectinload(FocusMember.user))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> list[tuple[Focus, str]]:
        """Focuses the user belongs to with the user's role, newest update first."""
        result = await self.session.execute(
            select(Focus, FocusMember.role)
            .join(FocusMember, FocusMember.focus_id == Focus.id)
            .where(FocusMember.user_id == user_id)
            .order_by(Focus.updated_at.desc())
        )
        return [(focus, role) for focus, role in result.all()]

    async def task_counts(self, focus_ids: list[str]) -> dict[str, int]:
        if not focus_ids:
            return {}
        result = await self.session.execute(
            select(Task.focus_id, func.count(Task.id))
            .where(Task.focus_id.in_(focus_ids))
            .group_by(Task.focus_id)
        )
        return {focus_id: count for focus_id, count in result.all()}

    async def member_counts(self, focus_ids: list[str]) -> dict[str, int]:
        if not focus_ids:
            return {}
        result = await self.session.execute(
            select(FocusMember.focus_id, func.count(FocusMember.id))
            .where(FocusMember.focus_id.in_(focus_ids))
            .group_by(FocusMember.focus_id)
        )
        return {focus_id: count for focus_id, count in result.all()}

    async def get_member(self, focus_id: str, user_id: str) -> FocusMember | None:
        result = await self.session.execute(
            select(FocusMember).where(
                FocusMember.focus_id == focus_id,
                FocusMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_member(self, focus_id: str, user_id: str, role: str) -> FocusMember:
        member = FocusMember(focus_id=focus_id, user_id=user_id, role=role)
        self.session.add(member)
        await self.session.flush()
        return member
