"""
User model for authentication database.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """User role levels."""
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """
    User document model for MongoDB auth_db.users collection.

    One row per identity-provider user, created on first authenticated request.
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: int = Field(..., alias="_id", description="Internal user id")
    external_auth_id: str = Field(..., description="Identity provider user id")
    email: Optional[str] = Field(None, description="Email address from the provider")
    name: Optional[str] = Field(None, description="Display name")
    role: UserRole = Field(default=UserRole.USER, description="Access role")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
