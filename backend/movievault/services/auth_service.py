"""
Authentication service: local users mirrored from the identity provider.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from movievault.database.databases import auth_db
from movievault.database.sequences import next_id
from movievault.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AuthService:
    """Service for local user records."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with auth database."""
        self.db = db
        self.users_collection = db[auth_db.Collections.USERS]

    async def get_or_create_user(self, claims: dict[str, Any]) -> User:
        """
        Get the local user for a verified identity, creating it on first sight.

        Two concurrent first requests for the same identity race on the unique
        ``external_auth_id`` index; the loser re-reads the winner's row, so each
        identity maps to exactly one local user.

        Args:
            claims: Verified token claims (``sub``, optional ``email``/``name``)

        Returns:
            The local User
        """
        external_auth_id = claims["sub"]
        now = datetime.now(timezone.utc)

        user_doc = await self.users_collection.find_one_and_update(
            {"external_auth_id": external_auth_id},
            {"$set": {"last_login_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        if user_doc:
            return User(**user_doc)

        user_doc = {
            "_id": await next_id(self.db, auth_db.Collections.USERS),
            "external_auth_id": external_auth_id,
            "email": claims.get("email"),
            "name": claims.get("name"),
            "role": UserRole.USER.value,
            "created_at": now,
            "updated_at": now,
            "last_login_at": now,
        }
        try:
            await self.users_collection.insert_one(user_doc)
            logger.info(f"Created local user {user_doc['_id']} for {external_auth_id}")
        except DuplicateKeyError:
            user_doc = await self.users_collection.find_one(
                {"external_auth_id": external_auth_id}
            )
            if user_doc is None:
                raise

        return User(**user_doc)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: Internal user id

        Returns:
            User model or None if not found
        """
        user_doc = await self.users_collection.find_one({"_id": user_id})

        if not user_doc:
            return None

        return User(**user_doc)
