"""
Movie record fields shared by vault entries, watchlist entries and the catalog.
"""
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Genre(BaseModel):
    """TMDB genre reference."""
    id: int
    name: str


class MovieFields(BaseModel):
    """
    Movie metadata copied from TMDB at write time.

    ``tmdb_id`` is a foreign reference and is not validated against TMDB.
    """
    tmdb_id: int = Field(..., gt=0, description="TMDB movie id")
    title: str = Field(..., min_length=1, description="Movie title")
    director: Optional[str] = None
    release_date: Optional[date] = Field(None, description="ISO calendar date")
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None
    genres: Optional[list[Genre]] = None
    vote_average: Optional[float] = None
    imdb_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v: Any) -> Any:
        """Accept plain dates and full ISO timestamps; keep only the calendar date."""
        if v in (None, ""):
            return None
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    def to_document(self) -> dict[str, Any]:
        """Convert to a MongoDB document body."""
        doc = self.model_dump()
        doc["release_date"] = date_to_storage(self.release_date)
        return doc


def date_to_storage(value: Optional[date]) -> Optional[datetime]:
    """Store calendar dates as midnight UTC (BSON has no date-only type)."""
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def date_from_storage(value: Optional[datetime]) -> Optional[date]:
    """Inverse of :func:`date_to_storage`."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value
