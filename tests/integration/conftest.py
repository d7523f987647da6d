"""
Integration Test Fixtures.

Fixtures for integration tests - uses the test database and the real
FastAPI app. Only the LLM gateway and the task queue are replaced.
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.database import get_db_session
from focusdesk.backend.gateway.assistant import (
    AssistantReply,
    FocusContext,
    get_assistant_gateway,
)


# =============================================================================
# Collaborator Fakes
# =============================================================================


class FakeAssistantGateway:
    """Stands in for BusinessAssistantGateway; records every call."""

    def __init__(self) -> None:
        self.reply = AssistantReply(
            reply="Start with a customer survey.",
            tasks=[{"title": "Survey 20 customers", "priority": "high", "due_at": None}],
            followup_questions=["What is your budget?"],
        )
        self.calls: list[tuple[FocusContext, list[tuple[str, str]]]] = []

    async def complete(
        self,
        context: FocusContext,
        history: list[tuple[str, str]],
    ) -> AssistantReply:
        self.calls.append((context, history))
        return self.reply


@pytest.fixture
def fake_gateway() -> FakeAssistantGateway:
    return FakeAssistantGateway()


@pytest.fixture
def dispatched() -> AsyncGenerator[AsyncMock, None]:
    """
    Capture queue dispatches instead of sending them to Redis.

    Each call's kwargs carry tg_id, text, type, user_id and log_id.
    """
    with patch(
        "focusdesk.backend.services.notifications.dispatch_delivery",
        new_callable=AsyncMock,
    ) as mock_dispatch:
        yield mock_dispatch


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    fake_gateway: FakeAssistantGateway,
    dispatched: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session override.

    All API operations share the test session, which is rolled back after
    the test.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    from focusdesk.backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_assistant_gateway] = lambda: fake_gateway

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """
    Build dev-login headers for a user.

    Usage:
        async def test_me(client, make_user, auth_headers):
            user = await make_user()
            await client.get("/api/v1/me", headers=auth_headers(user))
    """

    def _headers(user) -> dict[str, str]:
        return {"X-Dev-Tg-Id": str(user.tg_id)}

    return _headers


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code

        Returns:
            Response JSON data

        Raises:
            AssertionError: If response is not successful
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code
            expected_code: Expected error code (optional)

        Returns:
            Response JSON data

        Raises:
            AssertionError: If response is not an error or codes don't match
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request validation error (422).

        Args:
            response: httpx Response object
            field: Expected field with validation error (optional)

        Returns:
            Response JSON data
        """
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
