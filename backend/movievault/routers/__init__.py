"""
API Routers module.
"""
from movievault.routers import admin, health, movies, tags, tmdb, users, vaults, watchlist

__all__ = ["admin", "health", "movies", "tags", "tmdb", "users", "vaults", "watchlist"]
