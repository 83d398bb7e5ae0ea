"""
API response envelopes.

Every REST endpoint answers with {success, data, error}; errors raised
anywhere in a request are rendered as ErrorResponse by the handlers in
roomboard.core.errors.
"""
from typing import Generic, TypeVar, Optional
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Generic API response wrapper."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response wrapper."""
    success: bool = False
    error: str


class Deleted(BaseModel):
    """Deletion confirmation payload."""
    id: int
    deleted: bool = True
