"""
Library database configuration.
Stores vaults, watchlists, the shared movie catalog and user watch history.

Structure:
- vaults / vault_movies: user-owned named movie lists
- watchlist_movies: per-user watchlist
- movies: shared catalog keyed by internal id, unique per TMDB id
- user_movies: per-user watch history entries pointing at catalog movies
- oscar_data: Oscar nominations per catalog movie
- tags: per-user tag definitions referenced by movies and watchlist entries
"""

DB_NAME = "library_db"


class Collections:
    """Collection names in library_db."""
    VAULTS = "vaults"
    VAULT_MOVIES = "vault_movies"
    WATCHLIST_MOVIES = "watchlist_movies"
    MOVIES = "movies"
    USER_MOVIES = "user_movies"
    OSCAR_DATA = "oscar_data"
    TAGS = "tags"
    COUNTERS = "_counters"
    METADATA = "_metadata"

    # Index definitions for each collection
    INDEXES = {
        "vaults": [
            {"keys": [("user_id", 1), ("name", 1)], "unique": True},
            {"keys": [("user_id", 1), ("updated_at", -1)]},
        ],
        "vault_movies": [
            {"keys": [("vault_id", 1), ("tmdb_id", 1)], "unique": True},
            {"keys": [("vault_id", 1), ("created_at", -1)]},
        ],
        "watchlist_movies": [
            {"keys": [("user_id", 1), ("tmdb_id", 1)], "unique": True},
            {"keys": [("tag_ids", 1)]},
        ],
        "movies": [
            {"keys": [("tmdb_id", 1)], "unique": True, "sparse": True},
            {"keys": [("approval_status", 1)]},
            {"keys": [("tag_ids", 1)]},
        ],
        "user_movies": [
            {"keys": [("user_id", 1)]},
            {"keys": [("user_id", 1), ("movie_id", 1)]},
        ],
        "oscar_data": [
            {"keys": [("movie_id", 1)]},
            {"keys": [("ceremony_year", 1)]},
        ],
        "tags": [
            {"keys": [("user_id", 1), ("name", 1)], "unique": True},
        ],
    }


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "Vaults, watchlists, movie catalog and watch history",
    "collections": [
        Collections.VAULTS,
        Collections.VAULT_MOVIES,
        Collections.WATCHLIST_MOVIES,
        Collections.MOVIES,
        Collections.USER_MOVIES,
        Collections.OSCAR_DATA,
        Collections.TAGS,
        Collections.COUNTERS,
        Collections.METADATA,
    ],
    "access_level": "standard",
}
