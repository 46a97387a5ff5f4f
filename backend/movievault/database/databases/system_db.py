"""
System database configuration.
Cross-database registry and the append-only error log.
"""

DB_NAME = "system_db"


class Collections:
    """Collection names in system_db."""
    DB_REGISTRY = "db_registry"
    ERROR_LOGS = "error_logs"
    COUNTERS = "_counters"
    METADATA = "_metadata"

    INDEXES = {
        "error_logs": [
            {"keys": [("created_at", -1)]},
            {"keys": [("status_code", 1)]},
            {"keys": [("endpoint", 1)]},
        ],
    }


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "Cross-database registry and error log",
    "collections": [
        Collections.DB_REGISTRY,
        Collections.ERROR_LOGS,
        Collections.COUNTERS,
        Collections.METADATA,
    ],
    "access_level": "system",
}
