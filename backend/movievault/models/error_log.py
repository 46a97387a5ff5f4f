"""
Error log entry model for system_db.error_logs.
"""
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

# Request parameters are recorded as flat maps of primitives.
Primitive = Union[str, int, float, bool, None]


class ErrorLogEntry(BaseModel):
    """Append-only record of a failed request."""
    endpoint: str
    method: str
    status_code: int
    error_message: str
    stack_trace: Optional[str] = None
    user_id: Optional[int] = None
    request_params: Optional[dict[str, Primitive]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
