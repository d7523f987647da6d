"""
Request and response models.

``base`` holds the response envelope; the other modules mirror the
endpoint groups under /api/v1.
"""

from focusdesk.backend.schemas.base import ApiResponse, ErrorResponse, ORMModel

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "ORMModel",
]
