"""
Watchlist request/response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, Field

from movievault.models.movie import MovieFields
from movievault.schemas.tag import TagResponse


class WatchlistCreate(MovieFields):
    """Add movie to watchlist request."""
    tag_ids: list[int] = Field(default=[], description="Tags to attach")


class WatchlistUpdate(BaseModel):
    """Replace the tags of a watchlist entry."""
    tag_ids: list[int] = Field(..., description="New tag set")


class WatchlistMovieResponse(MovieFields):
    """Watchlist entry with resolved tags."""
    id: int
    user_id: int
    tags: list[TagResponse] = []
    created_at: datetime
    updated_at: datetime
