"""
Integration Tests for the Assistant API.

The LLM gateway is replaced by FakeAssistantGateway (see conftest).
"""

import pytest
from sqlalchemy import select

from focusdesk.backend.models import AssistantThread, Focus, FocusMember

API = "/api/v1"


def _assistant(focus) -> str:
    return f"{API}/focuses/{focus.id}/assistant"


class TestThread:
    @pytest.mark.asyncio
    async def test_new_focus_has_empty_thread(self, client, api, make_user, make_focus, auth_headers):
        """Should return the focus thread with no messages."""
        owner = await make_user()
        focus = await make_focus(owner)

        data = api.assert_success(
            await client.get(f"{_assistant(focus)}/thread", headers=auth_headers(owner))
        )["data"]

        assert data["thread"]["focus_id"] == focus.id
        assert data["messages"] == []

    @pytest.mark.asyncio
    async def test_outsider_cannot_read_thread(self, client, api, make_user, make_focus, auth_headers):
        """Should return 403 for non-members."""
        focus = await make_focus(await make_user())
        outsider = await make_user()

        response = await client.get(f"{_assistant(focus)}/thread", headers=auth_headers(outsider))

        api.assert_error(response, 403)


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_message_round_trip(
        self, client, api, make_user, make_focus, auth_headers, fake_gateway
    ):
        """Should store the question and the assistant's answer with suggestions."""
        owner = await make_user()
        focus = await make_focus(owner, title="Bakery", stage="idea")

        reply = api.assert_success(
            await client.post(
                f"{_assistant(focus)}/message",
                json={"content": "How do I find customers?"},
                headers=auth_headers(owner),
            )
        )["data"]

        assert reply["role"] == "assistant"
        assert reply["content"] == "Start with a customer survey."
        assert reply["meta"]["kind"] == "ai_response"
        assert reply["meta"]["suggested_tasks"][0]["title"] == "Survey 20 customers"

        context, history = fake_gateway.calls[0]
        assert context.title == "Bakery"
        assert context.stage == "idea"
        assert context.role == "owner"
        assert history == [("user", "How do I find customers?")]

        thread = api.assert_success(
            await client.get(f"{_assistant(focus)}/thread", headers=auth_headers(owner))
        )["data"]
        assert [m["role"] for m in thread["messages"]] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_focus_without_thread_gets_one(
        self, client, api, make_user, auth_headers, fake_gateway, db_session
    ):
        """Should open a thread on the first message when the focus has none."""
        owner = await make_user()
        focus = Focus(owner_user_id=owner.id, title="Legacy focus")
        focus.members.append(FocusMember(user_id=owner.id, role="owner"))
        db_session.add(focus)
        await db_session.flush()

        empty = api.assert_success(
            await client.get(f"{_assistant(focus)}/thread", headers=auth_headers(owner))
        )["data"]
        assert empty == {"thread": None, "messages": []}

        api.assert_success(
            await client.post(
                f"{_assistant(focus)}/message", json={"content": "Hi"}, headers=auth_headers(owner)
            )
        )

        threads = (
            await db_session.execute(select(AssistantThread).where(AssistantThread.focus_id == focus.id))
        ).scalars().all()
        assert len(threads) == 1
        thread = api.assert_success(
            await client.get(f"{_assistant(focus)}/thread", headers=auth_headers(owner))
        )["data"]
        assert thread["thread"]["id"] == threads[0].id
        assert [m["role"] for m in thread["messages"]] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_member_can_chat(self, client, api, make_user, make_focus, auth_headers, fake_gateway):
        """Should pass the member role into the context."""
        owner = await make_user()
        member = await make_user()
        focus = await make_focus(owner, members=(member,))

        api.assert_success(
            await client.post(
                f"{_assistant(focus)}/message", json={"content": "Hi"}, headers=auth_headers(member)
            )
        )

        assert fake_gateway.calls[0][0].role == "member"

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, client, api, make_user, make_focus, auth_headers):
        """Should reject an empty message."""
        owner = await make_user()
        focus = await make_focus(owner)

        response = await client.post(
            f"{_assistant(focus)}/message", json={"content": ""}, headers=auth_headers(owner)
        )

        api.assert_validation_error(response, field="content")


class TestPlanToTasks:
    @pytest.mark.asyncio
    async def test_owner_turns_plan_into_tasks(self, client, api, make_user, make_focus, auth_headers):
        """Should create every task of the plan with subtasks."""
        owner = await make_user()
        focus = await make_focus(owner)

        data = api.assert_success(
            await client.post(
                f"{_assistant(focus)}/plan_to_tasks",
                json={
                    "tasks": [
                        {"title": "Survey customers", "priority": "high", "subtasks": [{"title": "Write questions"}]},
                        {"title": "Pick a location"},
                    ]
                },
                headers=auth_headers(owner),
            ),
            expected_status=201,
        )["data"]

        assert [t["title"] for t in data] == ["Survey customers", "Pick a location"]
        assert data[0]["priority"] == "high"
        assert [s["title"] for s in data[0]["subtasks"]] == ["Write questions"]

    @pytest.mark.asyncio
    async def test_invalid_assignee_creates_nothing(
        self, client, api, make_user, make_focus, auth_headers
    ):
        """Should reject the whole plan when one assignee is not a member."""
        owner = await make_user()
        outsider = await make_user()
        focus = await make_focus(owner)

        response = await client.post(
            f"{_assistant(focus)}/plan_to_tasks",
            json={"tasks": [{"title": "Ok"}, {"title": "Bad", "assigned_to_user_id": outsider.id}]},
            headers=auth_headers(owner),
        )

        api.assert_error(response, 422, "VAL_VALIDATION_ERROR")
        listed = api.assert_success(
            await client.get(
                f"{API}/focuses/{focus.id}/tasks", params={"assigned": "all"}, headers=auth_headers(owner)
            )
        )["data"]
        assert listed == []

    @pytest.mark.asyncio
    async def test_member_cannot_apply_plan(self, client, api, make_user, make_focus, auth_headers):
        """Should be owner only."""
        owner = await make_user()
        member = await make_user()
        focus = await make_focus(owner, members=(member,))

        response = await client.post(
            f"{_assistant(focus)}/plan_to_tasks",
            json={"tasks": [{"title": "Mine"}]},
            headers=auth_headers(member),
        )

        api.assert_error(response, 403, "AUTHZ_OWNER_ONLY")

    @pytest.mark.asyncio
    async def test_empty_plan_rejected(self, client, api, make_user, make_focus, auth_headers):
        """Should require at least one task."""
        owner = await make_user()
        focus = await make_focus(owner)

        response = await client.post(
            f"{_assistant(focus)}/plan_to_tasks", json={"tasks": []}, headers=auth_headers(owner)
        )

        api.assert_validation_error(response, field="tasks")
