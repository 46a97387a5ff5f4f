"""
Admin router: error log diagnostics and user management.

Every endpoint requires the ``admin`` role.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from movievault.database.connections import get_mongo_client
from movievault.database.databases import auth_db, library_db, system_db
from movievault.dependencies.roles import AdminUser
from movievault.schemas.admin import AdminUserDetail, ErrorListResponse, ErrorStatsResponse
from movievault.schemas.common import ApiResponse
from movievault.schemas.user import AdminUserResponse, AdminUserUpdate
from movievault.services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])


async def get_admin_service() -> AdminService:
    """Dependency to get AdminService instance."""
    client = await get_mongo_client()
    return AdminService(
        client[system_db.DB_NAME],
        client[auth_db.DB_NAME],
        client[library_db.DB_NAME],
    )


# ==================== Errors ====================


@router.get(
    "/errors",
    response_model=ApiResponse[ErrorListResponse],
    summary="List error log",
)
async def list_errors(
    admin: AdminUser,
    endpoint: Optional[str] = Query(None, description="Endpoint contains"),
    status_code: Optional[str] = Query(None, description="Exact status code"),
    limit: int = Query(50, description="Page size"),
    offset: int = Query(0, description="Entries to skip"),
    admin_service: AdminService = Depends(get_admin_service),
):
    """
    Page through logged errors, newest first.

    - **endpoint**: substring filter
    - **status_code**: exact match; ignored unless it is an integer
    - **limit** / **offset**: pagination; `hasMore` tells whether more remain
    """
    result = await admin_service.list_errors(
        endpoint=endpoint,
        status_code=status_code,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=result)


@router.get(
    "/errors/stats",
    response_model=ApiResponse[ErrorStatsResponse],
    summary="Error statistics",
)
async def error_stats(
    admin: AdminUser,
    admin_service: AdminService = Depends(get_admin_service),
):
    return ApiResponse(data=await admin_service.error_stats())


# ==================== Users ====================


@router.get(
    "/users",
    response_model=ApiResponse[list[AdminUserResponse]],
    summary="List users",
)
async def list_users(
    admin: AdminUser,
    admin_service: AdminService = Depends(get_admin_service),
):
    return ApiResponse(data=await admin_service.list_users())


@router.get(
    "/users/{user_id}",
    response_model=ApiResponse[AdminUserDetail],
    summary="Get user",
)
async def get_user(
    user_id: int,
    admin: AdminUser,
    admin_service: AdminService = Depends(get_admin_service),
):
    """One user with content counts and vaults."""
    return ApiResponse(data=await admin_service.get_user(user_id))


@router.patch(
    "/users/{user_id}",
    response_model=ApiResponse[AdminUserResponse],
    summary="Update user",
)
async def update_user(
    user_id: int,
    body: AdminUserUpdate,
    admin: AdminUser,
    admin_service: AdminService = Depends(get_admin_service),
):
    """
    Update a user.

    - **role**: `user` or `admin`
    - **name**, **email**: profile fields
    """
    return ApiResponse(data=await admin_service.update_user(user_id, body))
