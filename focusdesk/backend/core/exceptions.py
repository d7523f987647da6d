"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Permission denied", code: str = "AUTHZ_FORBIDDEN") -> None:
        super().__init__(message, code=code)


class OwnerOnlyError(AuthorizationError):
    """Raised when a non-owner member attempts an owner-only action."""

    def __init__(self, message: str = "Only the project owner can do this") -> None:
        super().__init__(message, code="AUTHZ_OWNER_ONLY")


class NotAssigneeError(AuthorizationError):
    """Raised when a member edits a task assigned to someone else."""

    def __init__(self, message: str = "Only the task assignee can do this") -> None:
        super().__init__(message, code="AUTHZ_NOT_ASSIGNEE")


class TrialExpiredError(ApplicationError):
    """Raised when an inactive user attempts a paid action."""

    def __init__(self, message: str = "Trial period has expired. Please upgrade.") -> None:
        super().__init__(message, code="SUB_TRIAL_EXPIRED")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class GoneError(ApplicationError):
    """Raised when a resource existed but is no longer usable."""

    def __init__(self, message: str = "Resource is no longer available") -> None:
        super().__init__(message, code="RES_GONE")


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(self, message: str = "External service error") -> None:
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


class RateLimitError(ApplicationError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str = "Rate limit exceeded") -> None:
        super().__init__(message, code="RATE_LIMITED")


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
