"""
Authentication dependencies for route protection.
"""
from typing import Annotated, Optional

from fastapi import Depends, Header, Query, Request
from jose import JWTError

from movievault.core.errors import Unauthenticated
from movievault.core.security import decode_identity_token
from movievault.database.connections import get_mongo_client
from movievault.database.databases import auth_db
from movievault.models.user import User
from movievault.services.auth_service import AuthService


async def get_auth_service() -> AuthService:
    """Dependency to get AuthService instance."""
    client = await get_mongo_client()
    return AuthService(client[auth_db.DB_NAME])


def _extract_token(authorization: Optional[str], token: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    if token:
        return token
    return None


async def get_current_user(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
    token: Annotated[Optional[str], Query(description="Identity token")] = None,
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the caller from their identity token.

    The token is read from ``Authorization: Bearer <jwt>`` or ``?token=xxx``.
    A first-time identity gets a local user row.

    Raises:
        Unauthenticated: If the token is missing, invalid or expired
    """
    raw_token = _extract_token(authorization, token)
    if raw_token is None:
        raise Unauthenticated()

    try:
        claims = decode_identity_token(raw_token)
    except JWTError:
        raise Unauthenticated()

    user = await auth_service.get_or_create_user(claims)
    # Read by the error recorder
    request.state.user_id = user.id
    return user


# Type alias for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
