"""
Vaults router: named movie lists owned by the caller.
"""
from fastapi import APIRouter, Depends, status

from movievault.database.connections import get_mongo_client
from movievault.database.databases import library_db
from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse, MessageResponse
from movievault.schemas.vault import (
    VaultCreate,
    VaultUpdate,
    VaultResponse,
    VaultSummary,
    VaultDetail,
    VaultMovieCreate,
    VaultMovieResponse,
)
from movievault.services.vault_service import VaultService

router = APIRouter(prefix="/vaults", tags=["Vaults"])


async def get_vault_service() -> VaultService:
    """Dependency to get VaultService instance."""
    client = await get_mongo_client()
    return VaultService(client[library_db.DB_NAME])


# ==================== Vault CRUD ====================


@router.get(
    "",
    response_model=ApiResponse[list[VaultSummary]],
    summary="List vaults",
)
async def list_vaults(
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    """
    List the caller's vaults, most recently updated first, with movie
    counts and up to four preview posters.
    """
    return ApiResponse(data=await vault_service.list_vaults(current_user.id))


@router.post(
    "",
    response_model=ApiResponse[VaultResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create vault",
)
async def create_vault(
    body: VaultCreate,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    """
    Create a vault.

    - **name**: Vault name (required, unique per user)
    - **description**: Optional description
    """
    return ApiResponse(data=await vault_service.create_vault(current_user.id, body))


@router.get(
    "/{vault_id}",
    response_model=ApiResponse[VaultDetail],
    summary="Get vault with movies",
)
async def get_vault(
    vault_id: int,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    """
    Get a vault with its movies, each annotated with whether it is also in
    the caller's collection.
    """
    return ApiResponse(data=await vault_service.get_vault(vault_id, current_user.id))


@router.patch(
    "/{vault_id}",
    response_model=ApiResponse[VaultResponse],
    summary="Update vault",
)
async def update_vault(
    vault_id: int,
    body: VaultUpdate,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    return ApiResponse(data=await vault_service.update_vault(vault_id, current_user.id, body))


@router.delete(
    "/{vault_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete vault",
)
async def delete_vault(
    vault_id: int,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    """Delete a vault and every movie in it."""
    await vault_service.delete_vault(vault_id, current_user.id)
    return ApiResponse(data=MessageResponse(message="Vault deleted successfully"))


# ==================== Vault Movies ====================


@router.post(
    "/{vault_id}/movies",
    response_model=ApiResponse[VaultMovieResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add movie to vault",
)
async def add_vault_movie(
    vault_id: int,
    body: VaultMovieCreate,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    """
    Add a movie to a vault.

    - **tmdb_id**: TMDB movie id (required)
    - **title**: Movie title (required)
    - **release_date**: ISO date, optional

    A vault holds each TMDB id at most once.
    """
    movie = await vault_service.add_movie(vault_id, current_user.id, body)
    return ApiResponse(data=movie)


@router.delete(
    "/{vault_id}/movies/{movie_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Remove movie from vault",
)
async def remove_vault_movie(
    vault_id: int,
    movie_id: int,
    current_user: CurrentUser,
    vault_service: VaultService = Depends(get_vault_service),
):
    await vault_service.remove_movie(vault_id, movie_id, current_user.id)
    return ApiResponse(data=MessageResponse(message="Movie removed from vault"))
