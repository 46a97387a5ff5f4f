"""
Current user router.
"""
from fastapi import APIRouter

from movievault.dependencies.auth import CurrentUser
from movievault.schemas.common import ApiResponse
from movievault.schemas.user import UserResponse

router = APIRouter(prefix="/user", tags=["User"])


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get current user",
)
async def get_me(current_user: CurrentUser):
    """Return the caller's local user record."""
    return ApiResponse(data=UserResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
    ))
