"""
Response envelope shared by all endpoints.
"""
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope: ``{"success": true, "data": ...}``."""
    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    """Error response envelope."""
    success: bool = False
    error: str = Field(..., description="Short error message")


class MessageResponse(BaseModel):
    """Acknowledgement for deletes and other writes without a body."""
    message: str
