"""
Dependencies for dependency injection in routes.
"""
from movievault.dependencies.auth import CurrentUser, get_current_user
from movievault.dependencies.roles import AdminUser, require_admin

__all__ = [
    "CurrentUser",
    "get_current_user",
    "AdminUser",
    "require_admin",
]
