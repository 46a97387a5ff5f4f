"""
User request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from movievault.models.user import UserRole


class UserResponse(BaseModel):
    """Current user information."""
    id: int = Field(..., description="User ID")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = Field(None, description="Display name")
    role: UserRole = Field(..., description="Access role")


class UserStats(BaseModel):
    """Per-user content counts."""
    movies: int = 0
    watchlist: int = 0
    vaults: int = 0
    tags: int = 0


class AdminUserResponse(UserResponse):
    """User row as shown on the admin dashboard."""
    external_auth_id: str
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None
    stats: UserStats = Field(default_factory=UserStats)


class AdminUserUpdate(BaseModel):
    """Admin update of a user; role must be ``user`` or ``admin``."""
    role: Optional[UserRole] = None
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
