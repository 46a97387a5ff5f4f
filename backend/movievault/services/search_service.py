"""
Movie search: direct TMDB id lookup first, then text search.

Users paste either a title or a TMDB id/URL into the same search box. A query
that parses as an id is looked up directly; if that lookup fails for any
reason the same literal query goes through text search instead.
"""
import logging

from movievault.core.errors import ValidationError
from movievault.schemas.tmdb import SearchResponse
from movievault.services.tmdb_api import TMDBClient, TMDBError

logger = logging.getLogger(__name__)


class SearchService:
    """Service for TMDB movie search."""

    def __init__(self, tmdb: TMDBClient):
        self.tmdb = tmdb

    async def search(self, query: str, enhanced: bool = True) -> SearchResponse:
        """
        Search TMDB by title, id or URL.

        Args:
            query: Search text
            enhanced: Use multi-strategy text search

        Returns:
            SearchResponse tagged with the method that produced it

        Raises:
            ValidationError: If the query is blank (no upstream call is made)
            TMDBError: If the text search fails
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required")

        movie_id = self.tmdb.extract_tmdb_id(query)
        if movie_id is not None:
            try:
                movie = await self.tmdb.get_movie(movie_id)
                return SearchResponse(
                    results=[movie],
                    total_results=1,
                    total_pages=1,
                    searchMethod="direct_id",
                )
            except TMDBError as e:
                # Not-found and transient failures alike fall through to text search
                logger.warning(f"Direct TMDB lookup for id {movie_id} failed, falling back: {e}")

        if enhanced:
            page = await self.tmdb.search_enhanced(query)
        else:
            page = await self.tmdb.search(query)

        return SearchResponse(
            results=page.get("results") or [],
            total_results=page.get("total_results") or 0,
            total_pages=page.get("total_pages") or 0,
            searchMethod="enhanced" if enhanced else "basic",
        )
