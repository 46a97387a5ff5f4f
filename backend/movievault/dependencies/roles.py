"""
Role-based access control dependencies.
"""
from typing import Annotated

from fastapi import Depends

from movievault.core.errors import Forbidden
from movievault.dependencies.auth import get_current_user
from movievault.models.user import User


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency for admin-only routes.

    Usage:
        @router.get("/admin-only")
        async def admin_route(user: AdminUser):
            ...

    Raises:
        Forbidden: If the caller is not an admin
    """
    if not current_user.is_admin:
        raise Forbidden()
    return current_user


AdminUser = Annotated[User, Depends(require_admin)]
