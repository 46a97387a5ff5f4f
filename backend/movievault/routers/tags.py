"""
Tags router.
"""
from fastapi import APIRouter, Depends, status

from movievault.database.connections import get_mongo_client
from movievault.database.databases import library_db
from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse
from movievault.schemas.tag import TagCreate, TagResponse
from movievault.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])


async def get_tag_service() -> TagService:
    """Dependency to get TagService instance."""
    client = await get_mongo_client()
    return TagService(client[library_db.DB_NAME])


@router.get(
    "",
    response_model=ApiResponse[list[TagResponse]],
    summary="List tags",
)
async def list_tags(
    current_user: CurrentUser,
    tag_service: TagService = Depends(get_tag_service),
):
    return ApiResponse(data=await tag_service.list_tags(current_user.id))


@router.post(
    "",
    response_model=ApiResponse[TagResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create tag",
)
async def create_tag(
    body: TagCreate,
    current_user: CurrentUser,
    tag_service: TagService = Depends(get_tag_service),
):
    """
    Create a tag.

    - **name**: Tag name, unique per user
    - **color**: Hex color (default `#6366f1`)
    - **icon**: Icon name (default `tag`)
    """
    return ApiResponse(data=await tag_service.create_tag(current_user.id, body))
