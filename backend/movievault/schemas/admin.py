"""
Admin diagnostics schemas.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from movievault.schemas.user import AdminUserResponse
from movievault.schemas.vault import VaultSummary


class ErrorLogUser(BaseModel):
    """Minimal owning-user fields joined onto an error entry."""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class ErrorLogResponse(BaseModel):
    id: int
    endpoint: str
    method: str
    status_code: int
    error_message: str
    stack_trace: Optional[str] = None
    user_id: Optional[int] = None
    request_params: Optional[dict[str, Any]] = None
    created_at: datetime
    user: Optional[ErrorLogUser] = None


class ErrorPagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool = Field(..., description="offset + limit < total")


class ErrorListResponse(BaseModel):
    errors: list[ErrorLogResponse]
    pagination: ErrorPagination


class ErrorCounts(BaseModel):
    last_24h: int
    last_7d: int
    last_30d: int
    total: int


class ErrorTrend(BaseModel):
    error_rate_change_24h: float
    direction: Literal["increasing", "decreasing", "stable"]


class EndpointCount(BaseModel):
    endpoint: str
    count: int


class StatusCodeCount(BaseModel):
    status_code: int
    count: int


class ErrorStatsResponse(BaseModel):
    counts: ErrorCounts
    trend: ErrorTrend
    top_endpoints: list[EndpointCount]
    recent_errors: list[ErrorLogResponse]
    by_status_code: list[StatusCodeCount]


class AdminUserDetail(AdminUserResponse):
    """Single user with stats and vaults."""
    vaults: list[VaultSummary] = []
