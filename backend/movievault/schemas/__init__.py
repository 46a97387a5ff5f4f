"""
Request and response schemas for API endpoints.
"""
from movievault.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from movievault.schemas.user import UserResponse, UserStats, AdminUserResponse, AdminUserUpdate
from movievault.schemas.vault import (
    VaultCreate,
    VaultUpdate,
    VaultResponse,
    VaultSummary,
    VaultDetail,
    VaultMovieCreate,
    VaultMovieResponse,
    VaultMovieWithCollection,
)
from movievault.schemas.watchlist import WatchlistCreate, WatchlistUpdate, WatchlistMovieResponse
from movievault.schemas.tag import TagCreate, TagResponse, MovieTagsRequest
from movievault.schemas.tmdb import SearchRequest, SearchResponse, WatchProviders

__all__ = [
    # Envelope
    "ApiResponse",
    "ErrorResponse",
    "MessageResponse",
    # User
    "UserResponse",
    "UserStats",
    "AdminUserResponse",
    "AdminUserUpdate",
    # Vault
    "VaultCreate",
    "VaultUpdate",
    "VaultResponse",
    "VaultSummary",
    "VaultDetail",
    "VaultMovieCreate",
    "VaultMovieResponse",
    "VaultMovieWithCollection",
    # Watchlist
    "WatchlistCreate",
    "WatchlistUpdate",
    "WatchlistMovieResponse",
    # Tags
    "TagCreate",
    "TagResponse",
    "MovieTagsRequest",
    # TMDB
    "SearchRequest",
    "SearchResponse",
    "WatchProviders",
]
