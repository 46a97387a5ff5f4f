"""
Tag service: per-user tag definitions.
"""
from datetime import datetime, timezone
from typing import Any, Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from movievault.core.errors import Conflict
from movievault.database.databases import library_db
from movievault.database.sequences import next_id
from movievault.schemas.tag import DEFAULT_TAG_COLOR, DEFAULT_TAG_ICON, TagCreate, TagResponse


class TagService:
    """Service for tag operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with library database."""
        self.db = db
        self.tags = db[library_db.Collections.TAGS]

    async def list_tags(self, user_id: int) -> list[TagResponse]:
        """List the user's tags by name."""
        cursor = self.tags.find({"user_id": user_id}).sort("name", ASCENDING)
        return [tag_to_response(doc) for doc in await cursor.to_list(length=None)]

    async def create_tag(self, user_id: int, request: TagCreate) -> TagResponse:
        """
        Create a tag.

        Raises:
            Conflict: If the user already has a tag with this name
        """
        if await self.tags.find_one({"user_id": user_id, "name": request.name}):
            raise Conflict("Tag already exists")

        tag_doc = {
            "_id": await next_id(self.db, library_db.Collections.TAGS),
            "user_id": user_id,
            "name": request.name,
            "color": request.color,
            "icon": request.icon,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            await self.tags.insert_one(tag_doc)
        except DuplicateKeyError:
            raise Conflict("Tag already exists")
        return tag_to_response(tag_doc)

    async def find_or_create(self, user_id: int, name: str) -> dict[str, Any]:
        """Return the user's tag named ``name``, creating it with defaults."""
        tag_doc = await self.tags.find_one({"user_id": user_id, "name": name})
        if tag_doc:
            return tag_doc

        tag_doc = {
            "_id": await next_id(self.db, library_db.Collections.TAGS),
            "user_id": user_id,
            "name": name,
            "color": DEFAULT_TAG_COLOR,
            "icon": DEFAULT_TAG_ICON,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            await self.tags.insert_one(tag_doc)
        except DuplicateKeyError:
            tag_doc = await self.tags.find_one({"user_id": user_id, "name": name})
        return tag_doc

    async def get_tags(self, user_id: int, tag_ids: Iterable[int]) -> list[TagResponse]:
        """Resolve tag ids to the user's tags, ignoring ids of other users' tags."""
        tag_ids = list(tag_ids or [])
        if not tag_ids:
            return []
        cursor = self.tags.find(
            {"_id": {"$in": tag_ids}, "user_id": user_id}
        ).sort("name", ASCENDING)
        return [tag_to_response(doc) for doc in await cursor.to_list(length=None)]

    async def owned_tag_ids(self, user_id: int, tag_ids: Iterable[int]) -> list[int]:
        """Filter ``tag_ids`` down to the ones owned by the user, keeping order."""
        tag_ids = list(dict.fromkeys(tag_ids or []))
        if not tag_ids:
            return []
        owned = set(await self.tags.distinct(
            "_id", {"_id": {"$in": tag_ids}, "user_id": user_id}
        ))
        return [tag_id for tag_id in tag_ids if tag_id in owned]


def tag_to_response(doc: dict[str, Any]) -> TagResponse:
    return TagResponse(
        id=doc["_id"],
        name=doc["name"],
        color=doc.get("color") or DEFAULT_TAG_COLOR,
        icon=doc.get("icon") or DEFAULT_TAG_ICON,
        created_at=doc.get("created_at"),
    )
