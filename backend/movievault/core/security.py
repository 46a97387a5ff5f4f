"""
Identity token handling.

Session tokens are issued by the external identity provider and verified here
with the shared signing secret. The ``sub`` claim is the provider's user id.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from movievault.config import get_settings


def create_identity_token(
    external_auth_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed identity token in the provider's format.

    Used by local tooling and tests; production tokens come from the provider.

    Args:
        external_auth_id: Provider user id, stored as the ``sub`` claim
        email: Optional email claim
        name: Optional display name claim
        expires_delta: Optional custom expiration time (default: 1 hour)

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()

    if expires_delta is None:
        expires_delta = timedelta(hours=1)

    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": external_auth_id,
        "iat": now,
        "exp": now + expires_delta,
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if settings.auth_jwt_issuer:
        payload["iss"] = settings.auth_jwt_issuer
    if settings.auth_jwt_audience:
        payload["aud"] = settings.auth_jwt_audience

    return jwt.encode(
        payload,
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
    )


def decode_identity_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an identity token.

    Args:
        token: The JWT token string to decode

    Returns:
        Decoded claims with at least ``sub``

    Raises:
        JWTError: If the token is invalid, expired, or has no subject
    """
    settings = get_settings()

    options = {"verify_aud": settings.auth_jwt_audience is not None}
    claims = jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_jwt_audience,
        issuer=settings.auth_jwt_issuer,
        options=options,
    )
    if not claims.get("sub"):
        raise JWTError("Token has no subject")
    return claims
