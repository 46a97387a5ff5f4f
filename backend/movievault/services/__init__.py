"""
Service layer for business logic.
"""
from movievault.services.auth_service import AuthService
from movievault.services.vault_service import VaultService
from movievault.services.watchlist_service import WatchlistService
from movievault.services.tag_service import TagService
from movievault.services.movie_service import MovieService
from movievault.services.search_service import SearchService
from movievault.services.admin_service import AdminService

__all__ = [
    "AuthService",
    "VaultService",
    "WatchlistService",
    "TagService",
    "MovieService",
    "SearchService",
    "AdminService",
]
