"""
Tag request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_TAG_COLOR = "#6366f1"
DEFAULT_TAG_ICON = "tag"


class TagCreate(BaseModel):
    """Create tag request."""
    name: str = Field(..., min_length=1, max_length=50, description="Tag name")
    color: str = Field(default=DEFAULT_TAG_COLOR, description="Hex color")
    icon: str = Field(default=DEFAULT_TAG_ICON, description="Icon name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class TagResponse(BaseModel):
    """Tag response."""
    id: int
    name: str
    color: str = DEFAULT_TAG_COLOR
    icon: str = DEFAULT_TAG_ICON
    created_at: Optional[datetime] = None


class MovieTagsRequest(BaseModel):
    """Tag names to attach to or detach from a movie."""
    tags: list[str] = Field(..., description="Tag names")


class MovieTagsAdded(BaseModel):
    added: list[TagResponse]
    tags: list[TagResponse]


class MovieTagsRemoved(BaseModel):
    removed: list[str]
    tags: list[TagResponse]
