"""
TMDB router: search and lookups against The Movie Database.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Path

from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse
from movievault.schemas.tmdb import (
    SearchRequest,
    SearchResponse,
    TMDBMovieDetail,
    Trailer,
    WatchProviders,
)
from movievault.services.search_service import SearchService
from movievault.services.tmdb_api import TMDBClient, get_tmdb_api

router = APIRouter(prefix="/tmdb", tags=["TMDB"])


async def get_search_service() -> SearchService:
    """Dependency to get SearchService instance."""
    return SearchService(await get_tmdb_api())


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Search movies",
)
async def search_movies(
    body: SearchRequest,
    current_user: CurrentUser,
    search_service: SearchService = Depends(get_search_service),
):
    """
    Search TMDB by title, TMDB id or TMDB URL.

    A query that looks like an id is looked up directly (`searchMethod:
    direct_id`); otherwise, or if that lookup fails, a text search runs
    (`enhanced` or `basic`).
    """
    return await search_service.search(body.query, enhanced=body.enhanced)


@router.get(
    "/movie/{movie_id}",
    response_model=ApiResponse[TMDBMovieDetail],
    summary="Get TMDB movie",
)
async def get_tmdb_movie(
    current_user: CurrentUser,
    movie_id: int = Path(..., gt=0, description="TMDB movie id"),
    tmdb: TMDBClient = Depends(get_tmdb_api),
):
    movie = await tmdb.get_movie(movie_id)
    credits = await tmdb.get_credits(movie_id)
    return ApiResponse(data=TMDBMovieDetail(
        **movie,
        director=tmdb.find_director(credits),
        poster_url=tmdb.poster_url(movie.get("poster_path")),
        backdrop_url=tmdb.backdrop_url(movie.get("backdrop_path")),
    ))


@router.get(
    "/trailer/{movie_id}",
    response_model=ApiResponse[Optional[Trailer]],
    summary="Get best trailer",
)
async def get_trailer(
    current_user: CurrentUser,
    movie_id: int = Path(..., gt=0, description="TMDB movie id"),
    tmdb: TMDBClient = Depends(get_tmdb_api),
):
    """
    Best YouTube trailer for a movie, or `data: null` if there is none.
    """
    video = tmdb.find_best_trailer(await tmdb.get_videos(movie_id))
    if video is None:
        return ApiResponse(data=None)

    return ApiResponse(data=Trailer(
        key=video["key"],
        name=video.get("name", ""),
        site=video["site"],
        type=video["type"],
        official=bool(video.get("official")),
        youtube_url=tmdb.youtube_url(video["key"]),
        embed_url=tmdb.youtube_embed_url(video["key"]),
        thumbnail_url=tmdb.youtube_thumbnail_url(video["key"]),
    ))


@router.get(
    "/watch-providers/{movie_id}",
    response_model=ApiResponse[WatchProviders],
    summary="Get watch providers",
)
async def get_watch_providers(
    current_user: CurrentUser,
    movie_id: int = Path(..., gt=0, description="TMDB movie id"),
    tmdb: TMDBClient = Depends(get_tmdb_api),
):
    """Streaming, rental and purchase providers in the configured region."""
    return ApiResponse(data=await tmdb.get_watch_providers(movie_id))
