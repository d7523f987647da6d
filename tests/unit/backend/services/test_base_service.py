"""
Unit Tests for Base Service.

Tests the BaseService error wrapping and the focus membership guards.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from focusdesk.backend.core.exceptions import (
    AuthorizationError,
    ConflictError,
    DatabaseError,
    OwnerOnlyError,
)
from focusdesk.backend.models.enums import MemberRole
from focusdesk.backend.services.base import BaseService, FocusScopedService


class TestBaseServiceInit:
    def test_init_stores_session(self):
        """Should store the provided session."""
        mock_session = AsyncMock()

        service = BaseService(mock_session)

        assert service.session is mock_session
        assert service._logger is not None


class TestExecuteDbOperation:
    """Tests for _execute_db_operation method."""

    @pytest.fixture
    def service(self):
        return BaseService(AsyncMock())

    @pytest.mark.asyncio
    async def test_returns_result_on_success(self, service):
        async def successful_operation():
            return {"id": "123"}

        result = await service._execute_db_operation("create_task", successful_operation())

        assert result == {"id": "123"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["UNIQUE constraint failed", "duplicate key value"])
    async def test_raises_conflict_on_unique_violation(self, service, message):
        """Should raise ConflictError on unique constraint violations."""
        async def failing_operation():
            raise IntegrityError("statement", {}, Exception(message))

        with pytest.raises(ConflictError) as exc_info:
            await service._execute_db_operation("accept_invite", failing_operation())

        assert "already exists" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_raises_database_error_on_other_integrity_error(self, service):
        async def failing_operation():
            raise IntegrityError("statement", {}, Exception("foreign key constraint"))

        with pytest.raises(DatabaseError) as exc_info:
            await service._execute_db_operation("create_task", failing_operation())

        assert "constraint violation" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_raises_database_error_on_sqlalchemy_error(self, service):
        """Should raise DatabaseError on general SQLAlchemy errors."""
        async def failing_operation():
            raise SQLAlchemyError("Connection lost")

        with pytest.raises(DatabaseError) as exc_info:
            await service._execute_db_operation("list_tasks", failing_operation())

        assert "operation failed" in exc_info.value.message


class TestLoggingMethods:
    def test_log_operation_includes_service_name(self):
        """Should include service class name in log context."""
        service = BaseService(AsyncMock())

        with patch.object(service._logger, "info") as mock_info:
            service._log_operation("Creating task", focus_id="focus-1")

        extra = mock_info.call_args[1]["extra"]
        assert extra["service"] == "BaseService"
        assert extra["focus_id"] == "focus-1"


class TestFocusScopedService:
    """Tests for the membership guards."""

    @pytest.fixture
    def service(self):
        service = FocusScopedService(AsyncMock())
        service.focuses = MagicMock()
        service.focuses.get_member = AsyncMock()
        service.focuses.get_by_id_or_none = AsyncMock()
        return service

    @pytest.mark.asyncio
    async def test_member_passes(self, service, member_user, make_member):
        member = make_member(member_user)
        service.focuses.get_member.return_value = member

        assert await service._require_member("focus-1", member_user.id) is member

    @pytest.mark.asyncio
    async def test_non_member_forbidden(self, service):
        """Should raise 403 when the focus exists but the user is not in it."""
        service.focuses.get_member.return_value = None
        service.focuses.get_by_id_or_none.return_value = MagicMock()

        with pytest.raises(AuthorizationError):
            await service._require_member("focus-1", "stranger")

    @pytest.mark.asyncio
    async def test_missing_focus_forbidden(self, service):
        """Should answer an unknown focus like a foreign one."""
        service.focuses.get_member.return_value = None

        with pytest.raises(AuthorizationError):
            await service._require_member("missing", "stranger")

        service.focuses.get_by_id_or_none.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_guard(self, service, owner, member_user, make_member):
        """Should let the owner through and reject plain members."""
        service.focuses.get_member.return_value = make_member(owner, role=MemberRole.OWNER)
        assert (await service._require_owner("focus-1", owner.id)).is_owner

        service.focuses.get_member.return_value = make_member(member_user)
        with pytest.raises(OwnerOnlyError):
            await service._require_owner("focus-1", member_user.id)
