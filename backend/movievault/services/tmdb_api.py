"""
TMDB API client for movie metadata.

Wraps the TMDB v3 REST API (https://api.themoviedb.org/3):
- Movie search (basic and multi-strategy)
- Movie details, credits, videos and watch providers
- Image and YouTube URL helpers

Requests authenticate with the API read access token as a Bearer header.
"""
import logging
import re
from typing import Any, Optional

import httpx

from movievault.config import get_settings
from movievault.core.errors import ErrorKind, UpstreamFailure

logger = logging.getLogger(__name__)

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={key}"
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{key}"
YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{key}/{quality}.jpg"

PROVIDER_TYPES = ("flatrate", "rent", "buy")

_LEADING_ID = re.compile(r"^\s*(\d+)")
_URL_ID_PATTERNS = (
    re.compile(r"/movie/(\d+)"),
    re.compile(r"themoviedb\.org/movie/(\d+)"),
    re.compile(r"tmdb\.org/movie/(\d+)"),
)
_PUNCTUATION = re.compile(r"[^\w\s]")
_ARTICLES = re.compile(r"\b(the|a|an)\b", re.IGNORECASE)
_SPACES = re.compile(r"\s+")


class TMDBError(UpstreamFailure):
    """TMDB request failed."""
    default_message = "TMDB API error"


class TMDBNotFound(TMDBError):
    """TMDB has no such resource."""
    kind = ErrorKind.NOT_FOUND
    default_message = "Movie not found on TMDB"


def empty_page() -> dict[str, Any]:
    return {"page": 1, "results": [], "total_pages": 0, "total_results": 0}


class TMDBClient:
    """
    Async client for the TMDB REST API.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize TMDB client; ``transport`` replaces the network in tests."""
        self.settings = get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.tmdb_base_url,
                headers={
                    "Authorization": f"Bearer {self.settings.tmdb_api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.settings.tmdb_timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"TMDB request {path} failed: {e}")
            raise TMDBError(f"TMDB API request failed: {e}") from e

        if response.status_code == 404:
            raise TMDBNotFound()
        if response.status_code == 429:
            raise TMDBError("TMDB API rate limit exceeded")
        if response.is_error:
            logger.warning(f"TMDB request {path} returned {response.status_code}")
            raise TMDBError(
                f"TMDB API error: {response.status_code} {response.reason_phrase}"
            )
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"TMDB request {path} returned invalid JSON")
            raise TMDBError("TMDB API returned invalid JSON") from e

    # ==================== Search ====================

    async def search(
        self,
        query: str,
        year: Optional[int] = None,
        page: int = 1,
        include_adult: bool = False,
    ) -> dict[str, Any]:
        """
        Search movies by title.

        Args:
            query: Title text
            year: Optional release year filter
            page: Result page (1-based)
            include_adult: Include adult titles

        Returns:
            TMDB search page: ``{page, results, total_pages, total_results}``
        """
        params: dict[str, Any] = {
            "query": query,
            "page": page,
            "include_adult": str(include_adult).lower(),
        }
        if year:
            params["year"] = year
        return await self._request("/search/movie", params)

    async def search_enhanced(self, query: str, year: Optional[int] = None) -> dict[str, Any]:
        """
        Search with several strategies; the first non-empty page wins.

        1. Exact query
        2. Without the year filter (if a year was given)
        3. Including adult titles
        4. Cleaned query (punctuation and articles removed), if different
        5. Each word longer than two characters, keeping titles that contain
           one of the words

        A failing strategy is logged and skipped. If all come back empty the
        result is an empty page.
        """
        logger.info(f"Enhanced search for {query!r}" + (f" ({year})" if year else ""))

        strategies: list[tuple[str, dict[str, Any]]] = [("exact", {"query": query, "year": year})]
        if year:
            strategies.append(("no-year", {"query": query}))
        strategies.append(("adult", {"query": query, "year": year, "include_adult": True}))
        cleaned = self.clean_query(query)
        if cleaned and cleaned != query:
            strategies.append(("cleaned", {"query": cleaned, "year": year}))

        for name, kwargs in strategies:
            try:
                result = await self.search(**kwargs)
            except TMDBError as e:
                logger.warning(f"{name} search for {query!r} failed: {e}")
                continue
            if result.get("results"):
                logger.info(f"{name} search found {len(result['results'])} results")
                return result

        words = [word for word in query.split(" ") if len(word) > 2]
        if len(words) > 1:
            lowered = [word.lower() for word in words]
            for word in words:
                try:
                    result = await self.search(word, year)
                except TMDBError as e:
                    logger.warning(f"word search for {word!r} failed: {e}")
                    continue
                relevant = [
                    movie for movie in result.get("results", [])
                    if any(w in (movie.get("title") or "").lower() for w in lowered)
                ]
                if relevant:
                    logger.info(f"word search for {word!r} found {len(relevant)} results")
                    return {**result, "results": relevant}

        logger.info(f"All search strategies failed for {query!r}")
        return empty_page()

    @staticmethod
    def clean_query(query: str) -> str:
        """Strip punctuation and English articles, collapse whitespace."""
        cleaned = _PUNCTUATION.sub("", query)
        cleaned = _ARTICLES.sub("", cleaned)
        return _SPACES.sub(" ", cleaned).strip()

    @staticmethod
    def extract_tmdb_id(text: str) -> Optional[int]:
        """
        Interpret ``text`` as a TMDB movie id.

        Accepts a leading positive integer (``"27205"``, ``"27205-inception"``)
        or a URL containing ``/movie/<digits>``.
        """
        match = _LEADING_ID.match(text)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

        for pattern in _URL_ID_PATTERNS:
            match = pattern.search(text)
            if match and int(match.group(1)) > 0:
                return int(match.group(1))
        return None

    # ==================== Movie Details ====================

    async def get_movie(self, movie_id: int) -> dict[str, Any]:
        """
        Get full movie details.

        Raises:
            TMDBNotFound: If TMDB has no movie with this id
            TMDBError: On any other upstream failure
        """
        return await self._request(f"/movie/{movie_id}")

    async def get_credits(self, movie_id: int) -> dict[str, Any]:
        return await self._request(f"/movie/{movie_id}/credits")

    async def get_videos(self, movie_id: int) -> list[dict[str, Any]]:
        data = await self._request(f"/movie/{movie_id}/videos")
        return data.get("results", [])

    async def get_watch_providers(self, movie_id: int, region: Optional[str] = None) -> dict[str, Any]:
        """
        Get streaming/rental/purchase providers for one region.

        Providers are collected from flatrate, rent and buy in that order,
        keeping the first type seen per provider, then sorted by name.

        Returns:
            ``{"providers": [...], "link": str | None}``
        """
        region = region or self.settings.tmdb_region
        data = await self._request(f"/movie/{movie_id}/watch/providers")

        region_data = (data.get("results") or {}).get(region)
        if not region_data:
            return {"providers": [], "link": None}

        providers: list[dict[str, Any]] = []
        seen: set[int] = set()
        for provider_type in PROVIDER_TYPES:
            for provider in region_data.get(provider_type) or []:
                if provider["provider_id"] in seen:
                    continue
                seen.add(provider["provider_id"])
                providers.append({
                    "provider_id": provider["provider_id"],
                    "provider_name": provider["provider_name"],
                    "logo_path": provider.get("logo_path"),
                    "logo_url": self.image_url(provider.get("logo_path"), "w200"),
                    "type": provider_type,
                })

        providers.sort(key=lambda p: p["provider_name"].lower())
        return {"providers": providers, "link": region_data.get("link")}

    # ==================== Helpers ====================

    @staticmethod
    def find_director(credits: dict[str, Any]) -> Optional[str]:
        for person in credits.get("crew", []):
            if person.get("job") == "Director":
                return person.get("name")
        return None

    @staticmethod
    def find_best_trailer(videos: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
        """
        Pick the best YouTube trailer.

        Official videos beat unofficial ones; within a group, Trailer beats
        Teaser and larger sizes win.
        """
        trailers = [
            v for v in videos
            if v.get("site") == "YouTube" and v.get("type") in ("Trailer", "Teaser")
        ]
        if not trailers:
            return None

        official = [v for v in trailers if v.get("official")]
        candidates = official or trailers
        return sorted(
            candidates,
            key=lambda v: (v.get("type") != "Trailer", -(v.get("size") or 0)),
        )[0]

    def image_url(self, path: Optional[str], size: str = "w500") -> Optional[str]:
        if not path:
            return None
        return f"{self.settings.tmdb_image_base_url}/{size}{path}"

    def poster_url(self, path: Optional[str], size: str = "w500") -> Optional[str]:
        return self.image_url(path, size)

    def backdrop_url(self, path: Optional[str], size: str = "w1280") -> Optional[str]:
        return self.image_url(path, size)

    @staticmethod
    def youtube_url(key: str) -> str:
        return YOUTUBE_WATCH_URL.format(key=key)

    @staticmethod
    def youtube_embed_url(key: str) -> str:
        return YOUTUBE_EMBED_URL.format(key=key)

    @staticmethod
    def youtube_thumbnail_url(key: str, quality: str = "hqdefault") -> str:
        return YOUTUBE_THUMBNAIL_URL.format(key=key, quality=quality)


# Singleton instance
_tmdb_api: Optional[TMDBClient] = None


async def get_tmdb_api() -> TMDBClient:
    """Get shared TMDBClient instance."""
    global _tmdb_api
    if _tmdb_api is None:
        _tmdb_api = TMDBClient()
    return _tmdb_api


async def close_tmdb_api() -> None:
    """Close the shared client on shutdown."""
    global _tmdb_api
    if _tmdb_api is not None:
        await _tmdb_api.close()
        _tmdb_api = None
