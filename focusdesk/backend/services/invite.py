"""
Invite Service.

Owners share invite codes; any authenticated user can redeem one.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.exceptions import GoneError, NotFoundError
from focusdesk.backend.core.security import generate_invite_code
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.enums import MemberRole
from focusdesk.backend.models.focus import FocusMember
from focusdesk.backend.models.invite import Invite
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.invite import InviteRepository
from focusdesk.backend.schemas.invite import InviteCreate, InvitePreview
from focusdesk.backend.services.base import FocusScopedService
from focusdesk.backend.services.events import record_event


class InviteService(FocusScopedService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.invites = InviteRepository(session)

    async def create_invite(self, user: User, focus_id: str, data: InviteCreate) -> Invite:
        """Create an invite; missing options use the configured defaults."""
        await self._require_owner(focus_id, user.id)
        defaults = get_app_config().notifications.invites

        hours = data.expires_in_hours or defaults.expires_in_hours
        invite = await self._execute_db_operation(
            "create_invite",
            self.invites.create(
                focus_id=focus_id,
                created_by_user_id=user.id,
                code=generate_invite_code(),
                expires_at=utc_now() + timedelta(hours=hours),
                max_uses=data.max_uses or defaults.max_uses,
            ),
        )
        self._log_operation("Invite created", focus_id=focus_id, invite_id=invite.id)
        await record_event(
            self.session, "invite_created", user_id=user.id, focus_id=focus_id, props={"invite_id": invite.id}
        )
        return invite

    async def list_invites(self, user: User, focus_id: str) -> list[Invite]:
        await self._require_owner(focus_id, user.id)
        return await self.invites.list_for_focus(focus_id)

    async def _get_by_code(self, code: str, for_update: bool = False) -> Invite:
        invite = await self.invites.get_by_code(code, for_update=for_update)
        if invite is None:
            raise NotFoundError("Invite not found")
        return invite

    async def preview(self, code: str) -> InvitePreview:
        invite = await self._get_by_code(code)
        focus = await self.focuses.get_by_id(invite.focus_id)
        return InvitePreview(
            code=invite.code,
            focus_id=focus.id,
            focus_title=focus.title,
            expires_at=invite.expires_at,
            valid=not invite.is_expired(utc_now()) and not invite.is_exhausted(),
        )

    async def accept(self, user: User, code: str) -> FocusMember:
        """
        Join the invite's focus as a member.

        Existing members get their membership back and no use is consumed.

        Raises:
            NotFoundError: Unknown code
            GoneError: Expired or used up invite
        """
        # Locked so concurrent accepts cannot push use_count past max_uses
        invite = await self._get_by_code(code, for_update=True)

        existing = await self.focuses.get_member(invite.focus_id, user.id)
        if existing is not None:
            return existing

        if invite.is_expired(utc_now()):
            raise GoneError("Invite has expired")
        if invite.is_exhausted():
            raise GoneError("Invite has no uses left")

        member = await self._execute_db_operation(
            "accept_invite",
            self.focuses.add_member(invite.focus_id, user.id, MemberRole.MEMBER.value),
        )
        invite.use_count += 1
        await self.session.flush()

        self._log_operation("Invite accepted", focus_id=invite.focus_id, user_id=user.id)
        await record_event(
            self.session,
            "invite_accepted",
            user_id=user.id,
            focus_id=invite.focus_id,
            props={"invite_id": invite.id},
        )
        return member

    async def revoke(self, user: User, invite_id: str) -> None:
        invite = await self.invites.get_by_id(invite_id)
        await self._require_owner(invite.focus_id, user.id)
        await self._execute_db_operation("revoke_invite", self.invites.delete(invite))
