"""
Watchlist service: movies a user wants to see, with tags.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from movievault.core.errors import Conflict, NotFound
from movievault.database.databases import library_db
from movievault.database.sequences import next_id
from movievault.models.movie import date_from_storage
from movievault.schemas.watchlist import WatchlistCreate, WatchlistMovieResponse
from movievault.services.tag_service import TagService


class WatchlistService:
    """Service for watchlist operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with library database."""
        self.db = db
        self.watchlist = db[library_db.Collections.WATCHLIST_MOVIES]
        self.tag_service = TagService(db)

    async def list_movies(
        self, user_id: int, tag_id: Optional[int] = None
    ) -> list[WatchlistMovieResponse]:
        """List the user's watchlist, newest first, optionally by tag."""
        query: dict[str, Any] = {"user_id": user_id}
        if tag_id is not None:
            query["tag_ids"] = tag_id

        cursor = self.watchlist.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return [await self._to_response(doc) for doc in await cursor.to_list(length=None)]

    async def add_movie(self, user_id: int, request: WatchlistCreate) -> WatchlistMovieResponse:
        """
        Add a movie to the watchlist.

        Raises:
            Conflict: If the movie is already on the user's watchlist
        """
        if await self.watchlist.find_one({"user_id": user_id, "tmdb_id": request.tmdb_id}):
            raise Conflict("Movie already exists in watchlist")

        now = datetime.now(timezone.utc)
        movie_doc = request.to_document()
        movie_doc.update({
            "_id": await next_id(self.db, library_db.Collections.WATCHLIST_MOVIES),
            "user_id": user_id,
            "tag_ids": await self.tag_service.owned_tag_ids(user_id, request.tag_ids),
            "created_at": now,
            "updated_at": now,
        })
        try:
            await self.watchlist.insert_one(movie_doc)
        except DuplicateKeyError:
            raise Conflict("Movie already exists in watchlist")

        return await self._to_response(movie_doc)

    async def get_movie(self, entry_id: int, user_id: int) -> WatchlistMovieResponse:
        doc = await self.watchlist.find_one({"_id": entry_id, "user_id": user_id})
        if not doc:
            raise NotFound("Watchlist movie not found")
        return await self._to_response(doc)

    async def set_tags(
        self, entry_id: int, user_id: int, tag_ids: list[int]
    ) -> WatchlistMovieResponse:
        """Replace the entry's tags."""
        doc = await self.watchlist.find_one_and_update(
            {"_id": entry_id, "user_id": user_id},
            {"$set": {
                "tag_ids": await self.tag_service.owned_tag_ids(user_id, tag_ids),
                "updated_at": datetime.now(timezone.utc),
            }},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFound("Watchlist movie not found")
        return await self._to_response(doc)

    async def remove_movie(self, entry_id: int, user_id: int) -> None:
        result = await self.watchlist.delete_one({"_id": entry_id, "user_id": user_id})
        if result.deleted_count == 0:
            raise NotFound("Watchlist movie not found")

    async def _to_response(self, doc: dict[str, Any]) -> WatchlistMovieResponse:
        fields = {k: v for k, v in doc.items() if k not in ("_id", "tag_ids")}
        fields["id"] = doc["_id"]
        fields["release_date"] = date_from_storage(doc.get("release_date"))
        fields["tags"] = await self.tag_service.get_tags(doc["user_id"], doc.get("tag_ids", []))
        return WatchlistMovieResponse(**fields)
