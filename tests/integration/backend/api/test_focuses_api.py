"""
Integration Tests for Focus API.

Creates, reads, updates and deletes focuses through the HTTP API
against the test database.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models import AssistantThread, EventLog, FocusMember

FOCUSES = "/api/v1/focuses"


class TestCreateFocus:
    """Tests for POST /api/v1/focuses."""

    @pytest.mark.asyncio
    async def test_create_focus_makes_caller_owner(self, client, api, make_user, auth_headers, db_session):
        """Should create the focus, an owner membership and an assistant thread."""
        user = await make_user()

        response = await client.post(
            FOCUSES,
            json={"title": "Bakery", "stage": "idea", "budget": 5000},
            headers=auth_headers(user),
        )

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["title"] == "Bakery"
        assert data["role"] == "owner"
        assert data["status"] == "active"
        assert data["member_count"] == 1
        assert data["task_count"] == 0

        members = (await db_session.execute(
            select(FocusMember).where(FocusMember.focus_id == data["id"])
        )).scalars().all()
        assert [(m.user_id, m.role) for m in members] == [(user.id, "owner")]

        threads = (await db_session.execute(
            select(AssistantThread).where(AssistantThread.focus_id == data["id"])
        )).scalars().all()
        assert len(threads) == 1

    @pytest.mark.asyncio
    async def test_create_focus_starts_trial(self, client, api, make_user, auth_headers):
        """Should start the trial on the first focus."""
        user = await make_user()
        assert user.trial_started_at is None

        api.assert_success(
            await client.post(FOCUSES, json={"title": "Bakery"}, headers=auth_headers(user)),
            expected_status=201,
        )

        assert user.trial_started_at is not None

    @pytest.mark.asyncio
    async def test_create_focus_records_event(self, client, api, make_user, auth_headers, db_session):
        """Should write a create_focus analytics event."""
        user = await make_user()

        api.assert_success(
            await client.post(FOCUSES, json={"title": "Bakery"}, headers=auth_headers(user)),
            expected_status=201,
        )

        events = (await db_session.execute(
            select(EventLog).where(EventLog.event_name == "create_focus")
        )).scalars().all()
        assert len(events) == 1
        assert events[0].user_id == user.id

    @pytest.mark.asyncio
    async def test_create_focus_requires_title(self, client, api, make_user, auth_headers):
        """Should reject a focus without a title."""
        user = await make_user()

        response = await client.post(FOCUSES, json={"stage": "idea"}, headers=auth_headers(user))

        api.assert_validation_error(response, field="title")

    @pytest.mark.asyncio
    async def test_create_focus_blocked_after_trial(self, client, api, make_user, auth_headers):
        """Should return 402 once the trial has run out."""
        user = await make_user(trial_started_at=utc_now() - timedelta(days=30))

        response = await client.post(FOCUSES, json={"title": "Bakery"}, headers=auth_headers(user))

        api.assert_error(response, 402, "SUB_TRIAL_EXPIRED")

    @pytest.mark.asyncio
    async def test_create_focus_without_identity(self, client, api):
        """Should return 401 when the caller cannot be identified."""
        response = await client.post(FOCUSES, json={"title": "Bakery"})

        api.assert_error(response, 401, "AUTH_UNAUTHORIZED")


class TestListAndGetFocus:
    """Tests for reading focuses."""

    @pytest.mark.asyncio
    async def test_list_returns_only_my_focuses(self, client, api, make_user, make_focus, auth_headers):
        """Should list focuses the caller is a member of, with their role."""
        owner = await make_user()
        member = await make_user()
        outsider = await make_user()
        shared = await make_focus(owner, members=(member,), title="Shared")
        await make_focus(outsider, title="Private")

        data = api.assert_success(await client.get(FOCUSES, headers=auth_headers(member)))["data"]

        assert [f["id"] for f in data] == [shared.id]
        assert data[0]["role"] == "member"
        assert data[0]["member_count"] == 2

    @pytest.mark.asyncio
    async def test_list_newest_update_first(self, client, api, make_user, make_focus, auth_headers):
        """Should order focuses by updated_at, most recent first."""
        owner = await make_user()
        now = utc_now()
        stale = await make_focus(owner, title="Stale", updated_at=now - timedelta(days=3))
        fresh = await make_focus(owner, title="Fresh", updated_at=now)
        middle = await make_focus(owner, title="Middle", updated_at=now - timedelta(days=1))

        data = api.assert_success(await client.get(FOCUSES, headers=auth_headers(owner)))["data"]

        assert [f["id"] for f in data] == [fresh.id, middle.id, stale.id]

    @pytest.mark.asyncio
    async def test_get_focus_includes_members(self, client, api, make_user, make_focus, auth_headers):
        """Should return the focus with its member list."""
        owner = await make_user(first_name="Olga")
        member = await make_user(first_name="Max")
        focus = await make_focus(owner, members=(member,))

        data = api.assert_success(
            await client.get(f"{FOCUSES}/{focus.id}", headers=auth_headers(owner))
        )["data"]

        assert data["role"] == "owner"
        names = sorted(m["user"]["first_name"] for m in data["members"])
        assert names == ["Max", "Olga"]

    @pytest.mark.asyncio
    async def test_get_focus_forbidden_for_non_member(self, client, api, make_user, make_focus, auth_headers):
        """Should return 403 for users outside the focus."""
        focus = await make_focus(await make_user())
        outsider = await make_user()

        response = await client.get(f"{FOCUSES}/{focus.id}", headers=auth_headers(outsider))

        api.assert_error(response, 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_get_unknown_focus(self, client, api, make_user, auth_headers):
        """Should answer 403 for a focus that does not exist, as for a foreign one."""
        user = await make_user()

        response = await client.get(f"{FOCUSES}/missing", headers=auth_headers(user))

        api.assert_error(response, 403, "AUTHZ_FORBIDDEN")


class TestUpdateAndDeleteFocus:
    """Tests for owner-only focus mutations."""

    @pytest.mark.asyncio
    async def test_owner_updates_focus(self, client, api, make_user, make_focus, auth_headers):
        """Should apply a partial update."""
        owner = await make_user()
        focus = await make_focus(owner)

        response = await client.patch(
            f"{FOCUSES}/{focus.id}",
            json={"stage": "launch", "status": "paused"},
            headers=auth_headers(owner),
        )

        data = api.assert_success(response)["data"]
        assert data["stage"] == "launch"
        assert data["status"] == "paused"
        assert data["title"] == focus.title

    @pytest.mark.asyncio
    async def test_member_cannot_update(self, client, api, make_user, make_focus, auth_headers):
        """Should reject updates from non-owners."""
        owner = await make_user()
        member = await make_user()
        focus = await make_focus(owner, members=(member,))

        response = await client.patch(
            f"{FOCUSES}/{focus.id}", json={"title": "Mine now"}, headers=auth_headers(member)
        )

        api.assert_error(response, 403, "AUTHZ_OWNER_ONLY")

    @pytest.mark.asyncio
    async def test_owner_deletes_focus(self, client, api, make_user, make_focus, auth_headers):
        """Should delete the focus and answer 204."""
        owner = await make_user()
        focus = await make_focus(owner)

        response = await client.delete(f"{FOCUSES}/{focus.id}", headers=auth_headers(owner))

        assert response.status_code == 204
        listed = api.assert_success(await client.get(FOCUSES, headers=auth_headers(owner)))["data"]
        assert listed == []

    @pytest.mark.asyncio
    async def test_owner_removes_member(self, client, api, make_user, make_focus, auth_headers):
        """Should remove a member so they lose access."""
        owner = await make_user()
        member = await make_user()
        focus = await make_focus(owner, members=(member,))

        response = await client.delete(
            f"{FOCUSES}/{focus.id}/members/{member.id}", headers=auth_headers(owner)
        )

        assert response.status_code == 204
        api.assert_error(
            await client.get(f"{FOCUSES}/{focus.id}", headers=auth_headers(member)),
            403,
        )

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, client, api, make_user, make_focus, auth_headers):
        """Should refuse to remove the owner membership."""
        owner = await make_user()
        focus = await make_focus(owner)

        response = await client.delete(
            f"{FOCUSES}/{focus.id}/members/{owner.id}", headers=auth_headers(owner)
        )

        api.assert_error(response, 409, "RES_CONFLICT")
