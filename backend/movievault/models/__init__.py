"""
Document models mirroring the stored collections.
"""
from movievault.models.user import User, UserRole
from movievault.models.movie import Genre, MovieFields
from movievault.models.error_log import ErrorLogEntry

__all__ = ["User", "UserRole", "Genre", "MovieFields", "ErrorLogEntry"]
