"""
Movies router: the caller's collection over the shared catalog.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from movievault.database.connections import get_mongo_client
from movievault.database.databases import library_db
from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse, MessageResponse
from movievault.schemas.movie import (
    CollectionAdd,
    CollectionAddResponse,
    MovieDetail,
    MovieListResponse,
    WatchEntry,
    WatchEntryUpdate,
)
from movievault.schemas.tag import MovieTagsAdded, MovieTagsRemoved, MovieTagsRequest
from movievault.services.movie_service import MovieService
from movievault.services.tmdb_api import get_tmdb_api

router = APIRouter(prefix="/movies", tags=["Movies"])


async def get_movie_service() -> MovieService:
    """Dependency to get MovieService instance."""
    client = await get_mongo_client()
    return MovieService(client[library_db.DB_NAME], await get_tmdb_api())


# ==================== Collection ====================


@router.get(
    "",
    response_model=ApiResponse[MovieListResponse],
    summary="List collection",
)
async def list_movies(
    current_user: CurrentUser,
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Movies per page"),
    search: Optional[str] = Query(None, description="Title or director contains"),
    tag: Optional[str] = Query(None, description="favorites, oscar-winners, recent or a tag name"),
    year: Optional[int] = Query(None, ge=1, le=9998, description="Release year"),
    sort_by: str = Query("date_watched", description="Sort field"),
    sort_order: str = Query("desc", description="asc or desc"),
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    List the caller's collection with pagination.

    - **search**: Case-insensitive title/director match
    - **tag**: `favorites`, `oscar-winners`, `recent` (last 30 days) or a tag name
    - **sort_by**: `title`, `release_date`, `created_at`, `date_watched`, `personal_rating`
    """
    result = await movie_service.list_movies(
        current_user.id,
        page=page,
        limit=limit,
        search=search,
        tag=tag,
        year=year,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(data=result)


@router.post(
    "",
    response_model=ApiResponse[CollectionAddResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add movie to collection",
)
async def add_movie(
    body: CollectionAdd,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    Add a TMDB movie to the caller's collection with a first watch entry.

    Unknown movies are fetched from TMDB (details and director).
    """
    return ApiResponse(data=await movie_service.add_to_collection(current_user.id, body))


@router.get(
    "/{movie_id}",
    response_model=ApiResponse[MovieDetail],
    summary="Get movie details",
)
async def get_movie(
    movie_id: int,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    """Catalog movie with the caller's watch entries, Oscar data and tags."""
    return ApiResponse(data=await movie_service.get_movie(movie_id, current_user.id))


@router.patch(
    "/{movie_id}",
    response_model=ApiResponse[WatchEntry],
    summary="Update watch entry",
)
async def update_movie(
    movie_id: int,
    body: WatchEntryUpdate,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    Update a watch entry; without `user_movie_id` the most recently
    watched entry is changed.
    """
    entry = await movie_service.update_watch_entry(movie_id, current_user.id, body)
    return ApiResponse(data=entry)


@router.delete(
    "/{movie_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Remove movie from collection",
)
async def remove_movie(
    movie_id: int,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    await movie_service.remove_from_collection(movie_id, current_user.id)
    return ApiResponse(data=MessageResponse(message="Movie removed from collection"))


# ==================== Tags ====================


@router.post(
    "/{movie_id}/tags",
    response_model=ApiResponse[MovieTagsAdded],
    summary="Tag movie",
)
async def add_movie_tags(
    movie_id: int,
    body: MovieTagsRequest,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    """Attach tags by name, creating any the caller does not have yet."""
    result = await movie_service.add_tags(movie_id, current_user.id, body.tags)
    return ApiResponse(data=result)


@router.delete(
    "/{movie_id}/tags",
    response_model=ApiResponse[MovieTagsRemoved],
    summary="Untag movie",
)
async def remove_movie_tags(
    movie_id: int,
    body: MovieTagsRequest,
    current_user: CurrentUser,
    movie_service: MovieService = Depends(get_movie_service),
):
    result = await movie_service.remove_tags(movie_id, current_user.id, body.tags)
    return ApiResponse(data=result)
