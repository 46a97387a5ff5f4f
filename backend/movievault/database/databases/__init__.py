"""
Database definitions and collection constants.
"""
from movievault.database.databases import auth_db, library_db, system_db

__all__ = ["auth_db", "library_db", "system_db"]
