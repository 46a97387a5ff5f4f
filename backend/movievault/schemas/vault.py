"""
Vault request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from movievault.models.movie import MovieFields


class VaultCreate(BaseModel):
    """Create vault request."""
    name: str = Field(..., max_length=100, description="Vault name")
    description: Optional[str] = Field(None, max_length=1000, description="Vault description")


class VaultUpdate(BaseModel):
    """Update vault request."""
    name: Optional[str] = Field(None, max_length=100, description="Vault name")
    description: Optional[str] = Field(None, max_length=1000, description="Vault description")


class VaultResponse(BaseModel):
    """Vault response."""
    id: int = Field(..., description="Vault ID")
    user_id: int = Field(..., description="Owner user ID")
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VaultSummary(VaultResponse):
    """Vault list entry with a movie count and poster previews."""
    movie_count: int = 0
    preview_posters: list[str] = Field(default=[], description="Up to 4 newest poster paths")


class VaultMovieCreate(MovieFields):
    """Add movie to vault request; only ``tmdb_id`` and ``title`` are required."""


class VaultMovieResponse(MovieFields):
    """Movie stored in a vault."""
    id: int
    vault_id: int
    created_at: datetime


class VaultMovieWithCollection(VaultMovieResponse):
    """Vault movie annotated with the caller's collection membership."""
    in_collection: bool = False
    collection_movie_id: Optional[int] = None


class VaultDetail(VaultResponse):
    """Vault with its movies, newest first."""
    movies: list[VaultMovieWithCollection] = []
