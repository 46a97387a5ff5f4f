"""
TMDB search and lookup schemas.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from movievault.models.movie import Genre

SearchMethod = Literal["direct_id", "enhanced", "basic"]


class SearchRequest(BaseModel):
    """Free-text title, bare TMDB id or TMDB URL."""
    query: str = Field(..., description="Search text")
    enhanced: bool = Field(default=True, description="Use multi-strategy search")


class SearchResponse(BaseModel):
    """Search results; ``results`` are TMDB movie records as returned upstream."""
    success: bool = True
    results: list[dict[str, Any]] = []
    total_results: int = 0
    total_pages: int = 0
    searchMethod: SearchMethod


class TMDBMovieDetail(BaseModel):
    id: int
    title: str
    original_title: Optional[str] = None
    release_date: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    runtime: Optional[int] = None
    genres: list[Genre] = []
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    imdb_id: Optional[str] = None
    budget: Optional[int] = None
    revenue: Optional[int] = None
    tagline: Optional[str] = None
    director: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None


class Trailer(BaseModel):
    key: str
    name: str
    site: str
    type: str
    official: bool = False
    youtube_url: str
    embed_url: str
    thumbnail_url: str


class WatchProvider(BaseModel):
    provider_id: int
    provider_name: str
    logo_path: Optional[str] = None
    logo_url: Optional[str] = None
    type: Literal["flatrate", "rent", "buy"]


class WatchProviders(BaseModel):
    providers: list[WatchProvider] = []
    link: Optional[str] = None
