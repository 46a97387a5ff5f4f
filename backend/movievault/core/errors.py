"""
Application error taxonomy.

Every error raised by services carries an explicit ``kind``; the exception
handler in ``movievault.main`` maps the kind to an HTTP status instead of
inspecting the message text.
"""
from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """Classification of application errors."""
    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    # Duplicate keys are reported as client errors.
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class Unauthenticated(AppError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Unauthorized"


class Forbidden(AppError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden: Admin access required"


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists"


class UpstreamFailure(AppError):
    kind = ErrorKind.UPSTREAM
    default_message = "Upstream service error"
