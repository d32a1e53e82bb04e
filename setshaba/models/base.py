"""
Response envelopes shared by every route.

Success: {success, message, data, timestamp}
Error:   {error, statusCode, timestamp}
"""

from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for successful responses.
    ``data`` carries the payload object, ``message`` is optional.
    """
    success: bool = True
    message: Optional[str] = None
    data: T
    timestamp: datetime = Field(default_factory=utcnow)


class ErrorResponse(BaseModel):
    """Envelope for failed responses."""
    error: str
    statusCode: int
    timestamp: datetime = Field(default_factory=utcnow)
    details: Optional[List[Any]] = None
    detail: Optional[str] = None


class Page(BaseModel, Generic[T]):
    """
    One page of a listing.

    ``total`` is the number of rows matching the filters, not the length of
    ``items``.
    """
    items: List[T]
    total: int
    limit: int
    offset: int
