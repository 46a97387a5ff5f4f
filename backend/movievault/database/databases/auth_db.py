"""
Auth database configuration.
Stores local user records mirrored from the identity provider.
"""

DB_NAME = "auth_db"


class Collections:
    """Collection names in auth_db."""
    USERS = "users"
    COUNTERS = "_counters"
    METADATA = "_metadata"

    INDEXES = {
        "users": [
            {"keys": [("external_auth_id", 1)], "unique": True},
            {"keys": [("email", 1)]},
            {"keys": [("created_at", -1)]},
        ],
    }


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "Local user identities linked to the external identity provider",
    "collections": [Collections.USERS, Collections.COUNTERS, Collections.METADATA],
    "access_level": "restricted",
}
