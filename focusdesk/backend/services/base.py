"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, handle transactions, and implement
business rules.

Usage:
    from focusdesk.backend.services.base import BaseService

    class InviteService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.invites = InviteRepository(session)
"""

from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.exceptions import (
    AuthorizationError,
    ConflictError,
    DatabaseError,
    OwnerOnlyError,
)
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.models.focus import FocusMember
from focusdesk.backend.repositories.focus import FocusRepository

logger = get_logger(__name__)

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Database session management
    - Logging context
    - Error wrapping for database operations

    Subclasses should:
    - Call super().__init__(session) in their __init__
    - Initialize repositories in __init__
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Any,
    ) -> T:
        """
        Execute a database operation with error handling.

        Wraps database operations to convert SQLAlchemy exceptions
        to application-specific exceptions.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute

        Returns:
            Result of the coroutine

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )


class FocusScopedService(BaseService):
    """
    Base for services whose operations are gated by focus membership.

    Non-members get AuthorizationError (403); owner-only operations
    raise OwnerOnlyError.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.focuses = FocusRepository(session)

    async def _require_member(self, focus_id: str, user_id: str) -> FocusMember:
        member = await self.focuses.get_member(focus_id, user_id)
        # Unknown focuses answer 403 too, so ids cannot be probed
        if member is None:
            raise AuthorizationError("You are not a member of this project")
        return member

    async def _require_owner(self, focus_id: str, user_id: str) -> FocusMember:
        member = await self._require_member(focus_id, user_id)
        if not member.is_owner:
            raise OwnerOnlyError()
        return member
