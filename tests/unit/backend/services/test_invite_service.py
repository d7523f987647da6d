"""
Unit Tests for InviteService.accept and the invite lookup query.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from focusdesk.backend.core.exceptions import GoneError
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models.invite import Invite
from focusdesk.backend.repositories.invite import InviteRepository
from focusdesk.backend.services.invite import InviteService


def _invite(**fields) -> Invite:
    fields.setdefault("focus_id", "focus-1")
    fields.setdefault("created_by_user_id", "owner-1")
    fields.setdefault("code", "abc")
    fields.setdefault("use_count", 0)
    return Invite(id="invite-1", **fields)


@pytest.fixture
def service(mock_db_session):
    service = InviteService(mock_db_session)
    service.invites = MagicMock()
    service.invites.get_by_code = AsyncMock()
    service.focuses = MagicMock()
    service.focuses.get_member = AsyncMock(return_value=None)
    service.focuses.add_member = AsyncMock(side_effect=lambda focus_id, user_id, role: MagicMock(
        focus_id=focus_id, user_id=user_id, role=role
    ))
    return service


class TestInviteLookupQuery:
    @pytest.mark.asyncio
    async def test_for_update_locks_row(self, mock_db_session, mock_db_result):
        mock_db_session.execute.return_value = mock_db_result

        await InviteRepository(mock_db_session).get_by_code("abc", for_update=True)

        statement = mock_db_session.execute.await_args.args[0]
        assert "FOR UPDATE" in str(statement.compile(dialect=postgresql.dialect()))

    @pytest.mark.asyncio
    async def test_plain_lookup_does_not_lock(self, mock_db_session, mock_db_result):
        mock_db_session.execute.return_value = mock_db_result

        await InviteRepository(mock_db_session).get_by_code("abc")

        statement = mock_db_session.execute.await_args.args[0]
        assert "FOR UPDATE" not in str(statement.compile(dialect=postgresql.dialect()))


class TestAccept:
    @pytest.mark.asyncio
    async def test_accept_locks_and_counts_use(self, service, member_user):
        """Should read the invite under a row lock and consume one use."""
        invite = _invite(max_uses=2, expires_at=utc_now() + timedelta(days=1))
        service.invites.get_by_code.return_value = invite

        with patch("focusdesk.backend.services.invite.record_event", new_callable=AsyncMock):
            member = await service.accept(member_user, "abc")

        service.invites.get_by_code.assert_awaited_once_with("abc", for_update=True)
        assert member.user_id == member_user.id
        assert invite.use_count == 1

    @pytest.mark.asyncio
    async def test_exhausted_invite_is_gone(self, service, member_user):
        service.invites.get_by_code.return_value = _invite(max_uses=1, use_count=1)

        with pytest.raises(GoneError):
            await service.accept(member_user, "abc")

        service.focuses.add_member.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_member_keeps_use(self, service, member_user, make_member):
        """Should return the membership without consuming a use."""
        invite = _invite(max_uses=1, use_count=1)
        service.invites.get_by_code.return_value = invite
        existing = make_member(member_user)
        service.focuses.get_member.return_value = existing

        assert await service.accept(member_user, "abc") is existing
        assert invite.use_count == 1
