"""
Base Schemas.

Standard API response envelope and shared schema helpers.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from focusdesk.backend.core.utils import to_naive_utc, utc_now

DataT = TypeVar("DataT")


class ResponseMetadata(BaseModel):
    """Metadata included in all API responses."""

    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Standard API response envelope.

    All API responses use this structure for consistency.
    """

    success: bool = True
    data: DataT | None = None
    error: ErrorDetail | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    data: None = None
    error: ErrorDetail
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ORMModel(BaseModel):
    """Response schema readable from ORM instances."""

    model_config = ConfigDict(from_attributes=True)


def naive_datetime(value: datetime | None) -> datetime | None:
    """Field validator body: store every incoming datetime as naive UTC."""
    return to_naive_utc(value)


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def build_response(schema: type[SchemaT], obj: Any, **overrides: Any) -> SchemaT:
    """Validate a schema from an ORM object's attributes plus computed values."""
    data = {
        name: getattr(obj, name)
        for name in schema.model_fields
        if name not in overrides and hasattr(obj, name)
    }
    return schema.model_validate({**data, **overrides})
