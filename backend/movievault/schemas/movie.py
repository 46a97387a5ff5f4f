"""
Collection (catalog + watch history) request/response schemas.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from movievault.models.movie import Genre
from movievault.schemas.tag import TagResponse


class OscarBadges(BaseModel):
    """Oscar summary shown on collection cards."""
    nominations: int = 0
    wins: int = 0
    categories: list[str] = []


class CollectionMovie(BaseModel):
    """Movie card in the caller's collection."""
    id: int
    tmdb_id: Optional[int] = None
    title: str
    release_date: Optional[date] = None
    director: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    personal_rating: Optional[int] = None
    date_watched: Optional[datetime] = None
    is_favorite: bool = False
    oscar_badges: OscarBadges = Field(default_factory=OscarBadges)
    tags: list[TagResponse] = []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class MovieListResponse(BaseModel):
    movies: list[CollectionMovie]
    pagination: Pagination
    total_movies: int = Field(..., description="Size of the caller's whole collection")


class WatchEntry(BaseModel):
    """One viewing of a movie by the caller."""
    id: int
    date_watched: Optional[datetime] = None
    personal_rating: Optional[int] = None
    notes: Optional[str] = None
    is_favorite: bool = False
    watch_location: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OscarNomination(BaseModel):
    id: int
    ceremony_year: int
    category: str
    is_winner: bool = False
    nominee_name: Optional[str] = None


class MovieDetail(BaseModel):
    """Catalog movie with the caller's watch entries, Oscar data and tags."""
    id: int
    tmdb_id: Optional[int] = None
    title: str
    original_title: Optional[str] = None
    release_date: Optional[date] = None
    director: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    runtime: Optional[int] = None
    genres: Optional[list[Genre]] = None
    vote_average: Optional[float] = None
    imdb_id: Optional[str] = None
    tagline: Optional[str] = None
    approval_status: str = "approved"
    watch_entries: list[WatchEntry] = []
    oscar_data: list[OscarNomination] = []
    tags: list[TagResponse] = []


class CollectionAdd(BaseModel):
    """Add a TMDB movie to the caller's collection."""
    tmdb_id: int = Field(..., gt=0)
    personal_rating: Optional[int] = Field(None, ge=1, le=10)
    date_watched: Optional[datetime] = None
    is_favorite: bool = False
    notes: Optional[str] = None
    watch_location: Optional[str] = None
    tags: list[str] = []


class CollectionAddResponse(BaseModel):
    id: int
    tmdb_id: int
    title: str


class WatchEntryUpdate(BaseModel):
    """Update of the caller's watch entry; omitted fields stay unchanged."""
    user_movie_id: Optional[int] = Field(None, description="Entry to update; defaults to the latest")
    personal_rating: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = None
    is_favorite: Optional[bool] = None
    watch_location: Optional[str] = None
    date_watched: Optional[datetime] = None

    @field_validator("notes", "watch_location")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
