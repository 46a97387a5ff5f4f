"""
Watchlist router: movies the caller wants to watch.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from movievault.database.connections import get_mongo_client
from movievault.database.databases import library_db
from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse, MessageResponse
from movievault.schemas.watchlist import WatchlistCreate, WatchlistUpdate, WatchlistMovieResponse
from movievault.services.watchlist_service import WatchlistService

router = APIRouter(prefix="/watchlist", tags=["Watchlist"])


async def get_watchlist_service() -> WatchlistService:
    """Dependency to get WatchlistService instance."""
    client = await get_mongo_client()
    return WatchlistService(client[library_db.DB_NAME])


@router.get(
    "",
    response_model=ApiResponse[list[WatchlistMovieResponse]],
    summary="List watchlist",
)
async def list_watchlist(
    current_user: CurrentUser,
    tag_id: Optional[int] = Query(None, description="Only movies with this tag"),
    watchlist_service: WatchlistService = Depends(get_watchlist_service),
):
    return ApiResponse(data=await watchlist_service.list_movies(current_user.id, tag_id))


@router.post(
    "",
    response_model=ApiResponse[WatchlistMovieResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add movie to watchlist",
)
async def add_to_watchlist(
    body: WatchlistCreate,
    current_user: CurrentUser,
    watchlist_service: WatchlistService = Depends(get_watchlist_service),
):
    """
    Add a movie to the watchlist.

    - **tmdb_id**, **title**: required
    - **tag_ids**: ids of the caller's tags; unknown ids are dropped
    """
    return ApiResponse(data=await watchlist_service.add_movie(current_user.id, body))


@router.get(
    "/{entry_id}",
    response_model=ApiResponse[WatchlistMovieResponse],
    summary="Get watchlist movie",
)
async def get_watchlist_movie(
    entry_id: int,
    current_user: CurrentUser,
    watchlist_service: WatchlistService = Depends(get_watchlist_service),
):
    return ApiResponse(data=await watchlist_service.get_movie(entry_id, current_user.id))


@router.patch(
    "/{entry_id}",
    response_model=ApiResponse[WatchlistMovieResponse],
    summary="Replace watchlist movie tags",
)
async def update_watchlist_movie(
    entry_id: int,
    body: WatchlistUpdate,
    current_user: CurrentUser,
    watchlist_service: WatchlistService = Depends(get_watchlist_service),
):
    movie = await watchlist_service.set_tags(entry_id, current_user.id, body.tag_ids)
    return ApiResponse(data=movie)


@router.delete(
    "/{entry_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Remove movie from watchlist",
)
async def remove_from_watchlist(
    entry_id: int,
    current_user: CurrentUser,
    watchlist_service: WatchlistService = Depends(get_watchlist_service),
):
    await watchlist_service.remove_movie(entry_id, current_user.id)
    return ApiResponse(data=MessageResponse(message="Movie removed from watchlist"))
