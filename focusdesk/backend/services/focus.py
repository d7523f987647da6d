"""
Focus Service.

Business logic for focuses (projects) and their membership.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.exceptions import ConflictError, NotFoundError
from focusdesk.backend.models.assistant import AssistantThread
from focusdesk.backend.models.enums import MemberRole
from focusdesk.backend.models.focus import Focus, FocusMember
from focusdesk.backend.models.user import User
from focusdesk.backend.schemas.base import build_response
from focusdesk.backend.schemas.focus import (
    FocusCreate,
    FocusDetail,
    FocusResponse,
    FocusUpdate,
    MemberResponse,
)
from focusdesk.backend.services import subscription
from focusdesk.backend.services.base import FocusScopedService
from focusdesk.backend.services.events import record_event


class FocusService(FocusScopedService):
    """
    Service for focus business logic.

    Every read requires membership. Mutations of project-level fields
    and membership are owner-only.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_focuses(self, user: User) -> list[FocusResponse]:
        """Focuses the user belongs to, with role and counters."""
        rows = await self.focuses.list_for_user(user.id)
        ids = [focus.id for focus, _ in rows]
        task_counts = await self.focuses.task_counts(ids)
        member_counts = await self.focuses.member_counts(ids)

        return [
            build_response(
                FocusResponse,
                focus,
                role=role,
                task_count=task_counts.get(focus.id, 0),
                member_count=member_counts.get(focus.id, 0),
            )
            for focus, role in rows
        ]

    async def create_focus(self, user: User, data: FocusCreate) -> FocusResponse:
        """
        Create a focus owned by the user.

        The creator becomes the owner member, an assistant thread is
        opened and the user's trial starts if it has not yet.
        """
        subscription.ensure_active(user)
        self._log_operation("Creating focus", user_id=user.id, title=data.title)

        subscription.ensure_trial_started(user)

        focus = Focus(owner_user_id=user.id, **data.model_dump())
        focus.members.append(FocusMember(user_id=user.id, role=MemberRole.OWNER.value))
        focus.threads.append(AssistantThread())
        self.session.add(focus)

        await self._execute_db_operation("create_focus", self.session.flush())
        await record_event(self.session, "create_focus", user_id=user.id, focus_id=focus.id)

        return build_response(
            FocusResponse, focus, role=MemberRole.OWNER, task_count=0, member_count=1
        )

    async def get_focus(self, user: User, focus_id: str) -> FocusDetail:
        member = await self._require_member(focus_id, user.id)
        focus = await self.focuses.get_with_members(focus_id)
        if focus is None:
            raise NotFoundError("Focus not found")

        task_counts = await self.focuses.task_counts([focus_id])
        return build_response(
            FocusDetail,
            focus,
            role=member.role,
            task_count=task_counts.get(focus_id, 0),
            member_count=len(focus.members),
            members=[MemberResponse.model_validate(m) for m in focus.members],
        )

    async def update_focus(self, user: User, focus_id: str, data: FocusUpdate) -> FocusResponse:
        subscription.ensure_active(user)
        member = await self._require_owner(focus_id, user.id)

        update_data = data.model_dump(exclude_unset=True)
        if "status" in update_data and update_data["status"] is not None:
            update_data["status"] = update_data["status"].value
        if update_data.get("title", "") is None:
            # title is required on the row; an explicit null leaves it unchanged
            update_data.pop("title")

        focus = await self.focuses.get_by_id(focus_id)
        if update_data:
            self._log_operation(
                "Updating focus",
                focus_id=focus_id,
                fields=list(update_data.keys()),
            )
            await self._execute_db_operation(
                "update_focus",
                self.focuses.update(focus, **update_data),
            )
            await record_event(self.session, "update_focus", user_id=user.id, focus_id=focus_id)

        task_counts = await self.focuses.task_counts([focus_id])
        member_counts = await self.focuses.member_counts([focus_id])
        return build_response(
            FocusResponse,
            focus,
            role=member.role,
            task_count=task_counts.get(focus_id, 0),
            member_count=member_counts.get(focus_id, 0),
        )

    async def delete_focus(self, user: User, focus_id: str) -> None:
        """Delete a focus with its members, tasks, threads and invites."""
        await self._require_owner(focus_id, user.id)
        self._log_operation("Deleting focus", focus_id=focus_id)

        focus = await self.focuses.get_by_id(focus_id)
        await self._execute_db_operation("delete_focus", self.focuses.delete(focus))
        await record_event(self.session, "delete_focus", user_id=user.id, focus_id=focus_id)

    async def remove_member(self, user: User, focus_id: str, member_user_id: str) -> None:
        """
        Remove a member from a focus.

        Raises:
            ConflictError: When removing the owner
            NotFoundError: When the user is not a member
        """
        await self._require_owner(focus_id, user.id)

        member = await self.focuses.get_member(focus_id, member_user_id)
        if member is None:
            raise NotFoundError("Member not found")
        if member.is_owner:
            raise ConflictError("The project owner cannot be removed")

        self._log_operation("Removing member", focus_id=focus_id, member_user_id=member_user_id)
        await self._execute_db_operation("remove_member", self.focuses.delete(member))
