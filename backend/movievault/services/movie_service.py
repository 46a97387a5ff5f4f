"""
Collection service: the shared movie catalog seen through one user's watch
history.

Provides:
- Paginated, filtered and sorted collection listing
- Movie details with watch entries, Oscar data and tags
- Adding movies from TMDB and removing them from a collection
- Watch entry updates and movie tagging
"""
import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from movievault.core.errors import Conflict, NotFound, ValidationError
from movievault.database.databases import library_db
from movievault.database.sequences import next_id
from movievault.models.movie import date_from_storage, date_to_storage
from movievault.schemas.movie import (
    CollectionAdd,
    CollectionAddResponse,
    CollectionMovie,
    MovieDetail,
    MovieListResponse,
    OscarBadges,
    OscarNomination,
    Pagination,
    WatchEntry,
    WatchEntryUpdate,
)
from movievault.schemas.tag import MovieTagsAdded, MovieTagsRemoved, TagResponse
from movievault.services.tag_service import TagService, tag_to_response
from movievault.services.tmdb_api import TMDBClient

logger = logging.getLogger(__name__)

APPROVED = "approved"
REMOVED = "removed"

SORT_FIELDS = {"title", "release_date", "created_at", "date_watched", "personal_rating"}
# Sorted in memory because they live on the user's watch entries
USER_SORT_FIELDS = {"date_watched", "personal_rating"}

RECENT_DAYS = 30

# datetime needs year + 1 to stay in range
MIN_YEAR = 1
MAX_YEAR = 9998


def _timestamp(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _parse_tmdb_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return date_to_storage(date.fromisoformat(value[:10]))
    except ValueError:
        return None


class MovieService:
    """Service for the user's movie collection."""

    def __init__(self, db: AsyncIOMotorDatabase, tmdb: Optional[TMDBClient] = None):
        """Initialize with library database and an optional TMDB client for adds."""
        self.db = db
        self.movies = db[library_db.Collections.MOVIES]
        self.user_movies = db[library_db.Collections.USER_MOVIES]
        self.oscar_data = db[library_db.Collections.OSCAR_DATA]
        self.tag_service = TagService(db)
        self.tmdb = tmdb

    # ==================== Listing ====================

    async def list_movies(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        year: Optional[int] = None,
        sort_by: str = "date_watched",
        sort_order: str = "desc",
    ) -> MovieListResponse:
        """
        List the user's collection.

        ``tag`` is one of ``favorites``, ``oscar-winners``, ``recent`` or the
        name of one of the user's tags. Sorting by ``date_watched`` puts
        movies with a watch date first and falls back to the release date.
        """
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"Invalid sort field: {sort_by}")
        if sort_order not in ("asc", "desc"):
            raise ValidationError(f"Invalid sort order: {sort_order}")

        entries = await self._entries_by_movie(user_id)
        all_ids = list(entries)

        candidate_ids = await self._filter_by_tag(user_id, entries, tag)
        query: dict[str, Any] = {"_id": {"$in": candidate_ids}, "approval_status": APPROVED}
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"director": pattern}]
        if year is not None:
            if not MIN_YEAR <= year <= MAX_YEAR:
                raise ValidationError(f"Invalid year: {year}")
            query["release_date"] = {
                "$gte": datetime(year, 1, 1, tzinfo=timezone.utc),
                "$lt": datetime(year + 1, 1, 1, tzinfo=timezone.utc),
            }

        total = await self.movies.count_documents(query)
        total_movies = await self.movies.count_documents(
            {"_id": {"$in": all_ids}, "approval_status": APPROVED}
        )
        skip = (page - 1) * limit
        direction = DESCENDING if sort_order == "desc" else ASCENDING

        if sort_by in USER_SORT_FIELDS:
            docs = await self.movies.find(query).to_list(length=None)
            docs = self._sort_by_entries(docs, entries, sort_by, sort_order == "desc")
            docs = docs[skip:skip + limit]
        else:
            cursor = self.movies.find(query).sort([(sort_by, direction), ("_id", direction)])
            docs = await cursor.skip(skip).limit(limit).to_list(length=limit)

        movies = await self._collection_items(user_id, docs, entries)
        total_pages = math.ceil(total / limit) if total else 0

        return MovieListResponse(
            movies=movies,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=total_pages,
                has_next=page < total_pages,
                has_prev=page > 1,
            ),
            total_movies=total_movies,
        )

    async def _entries_by_movie(self, user_id: int) -> dict[int, list[dict[str, Any]]]:
        """The user's watch entries grouped by movie id, latest watch first."""
        cursor = self.user_movies.find({"user_id": user_id})
        grouped: dict[int, list[dict[str, Any]]] = {}
        for entry in await cursor.to_list(length=None):
            grouped.setdefault(entry["movie_id"], []).append(entry)
        for movie_entries in grouped.values():
            movie_entries.sort(key=lambda e: _timestamp(e.get("date_watched")), reverse=True)
        return grouped

    async def _filter_by_tag(
        self, user_id: int, entries: dict[int, list[dict[str, Any]]], tag: Optional[str]
    ) -> list[int]:
        movie_ids = list(entries)
        if not tag:
            return movie_ids

        if tag == "favorites":
            return [m for m, es in entries.items() if any(e.get("is_favorite") for e in es)]

        if tag == "recent":
            cutoff = _timestamp(datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS))
            return [
                m for m, es in entries.items()
                if any(_timestamp(e.get("date_watched")) >= cutoff for e in es if e.get("date_watched"))
            ]

        if tag == "oscar-winners":
            return await self.oscar_data.distinct(
                "movie_id", {"movie_id": {"$in": movie_ids}, "is_winner": True}
            )

        tag_doc = await self.tag_service.tags.find_one({"user_id": user_id, "name": tag})
        if not tag_doc:
            return []
        return await self.movies.distinct(
            "_id", {"_id": {"$in": movie_ids}, "tag_ids": tag_doc["_id"]}
        )

    @staticmethod
    def _sort_by_entries(
        docs: list[dict[str, Any]],
        entries: dict[int, list[dict[str, Any]]],
        sort_by: str,
        descending: bool,
    ) -> list[dict[str, Any]]:
        def latest(doc: dict[str, Any]) -> dict[str, Any]:
            return (entries.get(doc["_id"]) or [{}])[0]

        if sort_by == "personal_rating":
            return sorted(
                docs,
                key=lambda d: latest(d).get("personal_rating") or 0,
                reverse=descending,
            )

        # Movies without a watch date go after dated ones when descending,
        # and among themselves are ordered by release date.
        def watched_key(doc: dict[str, Any]) -> tuple[bool, float, float]:
            watched = latest(doc).get("date_watched")
            return (
                watched is not None,
                _timestamp(watched),
                _timestamp(doc.get("release_date")),
            )

        return sorted(docs, key=watched_key, reverse=descending)

    async def _collection_items(
        self,
        user_id: int,
        docs: list[dict[str, Any]],
        entries: dict[int, list[dict[str, Any]]],
    ) -> list[CollectionMovie]:
        movie_ids = [doc["_id"] for doc in docs]
        oscars: dict[int, list[dict[str, Any]]] = {}
        if movie_ids:
            cursor = self.oscar_data.find({"movie_id": {"$in": movie_ids}})
            for nomination in await cursor.to_list(length=None):
                oscars.setdefault(nomination["movie_id"], []).append(nomination)

        items = []
        for doc in docs:
            movie_entries = entries.get(doc["_id"], [])
            latest = movie_entries[0] if movie_entries else {}
            nominations = oscars.get(doc["_id"], [])
            items.append(CollectionMovie(
                id=doc["_id"],
                tmdb_id=doc.get("tmdb_id"),
                title=doc["title"],
                release_date=date_from_storage(doc.get("release_date")),
                director=doc.get("director"),
                poster_path=doc.get("poster_path"),
                backdrop_path=doc.get("backdrop_path"),
                personal_rating=latest.get("personal_rating"),
                date_watched=latest.get("date_watched"),
                is_favorite=any(e.get("is_favorite") for e in movie_entries),
                oscar_badges=OscarBadges(
                    nominations=len(nominations),
                    wins=sum(1 for n in nominations if n.get("is_winner")),
                    categories=[n["category"] for n in nominations],
                ),
                tags=await self.tag_service.get_tags(user_id, doc.get("tag_ids", [])),
            ))
        return items

    # ==================== Details ====================

    async def get_movie(self, movie_id: int, user_id: int) -> MovieDetail:
        """Catalog movie with the user's watch entries, Oscar data and tags."""
        doc = await self._get_catalog_movie(movie_id)

        entries = await self.user_movies.find(
            {"movie_id": movie_id, "user_id": user_id}
        ).to_list(length=None)
        entries.sort(key=lambda e: _timestamp(e.get("date_watched")), reverse=True)

        oscar_cursor = self.oscar_data.find({"movie_id": movie_id}).sort("ceremony_year", DESCENDING)
        nominations = await oscar_cursor.to_list(length=None)

        fields = {k: v for k, v in doc.items() if k not in ("_id", "tag_ids", "release_date")}
        return MovieDetail(
            **fields,
            id=doc["_id"],
            release_date=date_from_storage(doc.get("release_date")),
            watch_entries=[_entry_to_response(e) for e in entries],
            oscar_data=[OscarNomination(id=n["_id"], **{k: v for k, v in n.items() if k != "_id"})
                        for n in nominations],
            tags=await self.tag_service.get_tags(user_id, doc.get("tag_ids", [])),
        )

    # ==================== Collection Writes ====================

    async def add_to_collection(self, user_id: int, request: CollectionAdd) -> CollectionAddResponse:
        """
        Add a TMDB movie to the user's collection.

        The catalog row is shared: an existing row is reused (and re-approved
        if it had been removed), otherwise it is created from TMDB.

        Raises:
            Conflict: If the movie is already in the user's collection
        """
        movie = await self.movies.find_one({"tmdb_id": request.tmdb_id})

        if movie is not None:
            if await self.user_movies.find_one({"movie_id": movie["_id"], "user_id": user_id}):
                raise Conflict("Movie already exists in your collection")

        now = datetime.now(timezone.utc)
        if movie is None:
            movie = await self._create_catalog_movie(request.tmdb_id)
        elif movie.get("approval_status") == REMOVED:
            movie = await self.movies.find_one_and_update(
                {"_id": movie["_id"]},
                {"$set": {"approval_status": APPROVED, "updated_at": now}},
                return_document=ReturnDocument.AFTER,
            )

        await self.user_movies.insert_one({
            "_id": await next_id(self.db, library_db.Collections.USER_MOVIES),
            "movie_id": movie["_id"],
            "user_id": user_id,
            "date_watched": request.date_watched,
            "personal_rating": request.personal_rating,
            "notes": request.notes or None,
            "is_favorite": request.is_favorite,
            "watch_location": request.watch_location or None,
            "created_at": now,
            "updated_at": now,
        })

        names = [name.strip() for name in request.tags if name and name.strip()]
        if names:
            await self._attach_tags(movie["_id"], user_id, names)

        return CollectionAddResponse(id=movie["_id"], tmdb_id=movie["tmdb_id"], title=movie["title"])

    async def _create_catalog_movie(self, tmdb_id: int) -> dict[str, Any]:
        if self.tmdb is None:
            raise RuntimeError("MovieService needs a TMDB client to create catalog movies")

        details = await self.tmdb.get_movie(tmdb_id)
        credits = await self.tmdb.get_credits(tmdb_id)
        now = datetime.now(timezone.utc)

        movie_doc = {
            "_id": await next_id(self.db, library_db.Collections.MOVIES),
            "tmdb_id": tmdb_id,
            "title": details.get("title") or details.get("original_title") or str(tmdb_id),
            "original_title": details.get("original_title"),
            "release_date": _parse_tmdb_date(details.get("release_date")),
            "director": self.tmdb.find_director(credits),
            "overview": details.get("overview"),
            "poster_path": details.get("poster_path"),
            "backdrop_path": details.get("backdrop_path"),
            "runtime": details.get("runtime"),
            "genres": details.get("genres") or None,
            "vote_average": details.get("vote_average"),
            "imdb_id": details.get("imdb_id"),
            "tagline": details.get("tagline"),
            "approval_status": APPROVED,
            "tag_ids": [],
            "created_at": now,
            "updated_at": now,
        }
        try:
            await self.movies.insert_one(movie_doc)
        except DuplicateKeyError:
            # Another request created the catalog row first
            movie_doc = await self.movies.find_one({"tmdb_id": tmdb_id})
        logger.info(f"Added TMDB movie {tmdb_id} to catalog as {movie_doc['_id']}")
        return movie_doc

    async def remove_from_collection(self, movie_id: int, user_id: int) -> None:
        """Delete the user's watch entries for a movie; the catalog row stays."""
        result = await self.user_movies.delete_many({"movie_id": movie_id, "user_id": user_id})
        if result.deleted_count == 0:
            raise NotFound("Movie not found in your collection")

    async def update_watch_entry(
        self, movie_id: int, user_id: int, request: WatchEntryUpdate
    ) -> WatchEntry:
        """
        Update one of the user's watch entries for a movie.

        Without ``user_movie_id`` the most recently watched entry is updated.
        """
        if request.user_movie_id is not None:
            entry = await self.user_movies.find_one(
                {"_id": request.user_movie_id, "movie_id": movie_id, "user_id": user_id}
            )
        else:
            entries = await self.user_movies.find(
                {"movie_id": movie_id, "user_id": user_id}
            ).to_list(length=None)
            entries.sort(key=lambda e: _timestamp(e.get("date_watched")), reverse=True)
            entry = entries[0] if entries else None

        if not entry:
            raise NotFound("Movie not found in your collection")

        update_data = request.model_dump(exclude_unset=True, exclude={"user_movie_id"})
        update_data["updated_at"] = datetime.now(timezone.utc)

        updated = await self.user_movies.find_one_and_update(
            {"_id": entry["_id"]},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return _entry_to_response(updated)

    # ==================== Tags ====================

    async def add_tags(self, movie_id: int, user_id: int, names: list[str]) -> MovieTagsAdded:
        """Find-or-create each tag name for the user and attach it to the movie."""
        names = _clean_tag_names(names)
        await self._get_catalog_movie(movie_id)

        added = await self._attach_tags(movie_id, user_id, names)
        movie = await self.movies.find_one({"_id": movie_id})
        return MovieTagsAdded(
            added=added,
            tags=await self.tag_service.get_tags(user_id, movie.get("tag_ids", [])),
        )

    async def remove_tags(self, movie_id: int, user_id: int, names: list[str]) -> MovieTagsRemoved:
        """Detach the user's tags with these names from the movie."""
        names = _clean_tag_names(names)
        movie = await self._get_catalog_movie(movie_id)

        attached = set(movie.get("tag_ids", []))
        cursor = self.tag_service.tags.find({"user_id": user_id, "name": {"$in": names}})
        to_remove = [t for t in await cursor.to_list(length=None) if t["_id"] in attached]

        if to_remove:
            movie = await self.movies.find_one_and_update(
                {"_id": movie_id},
                {
                    "$pull": {"tag_ids": {"$in": [t["_id"] for t in to_remove]}},
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
                return_document=ReturnDocument.AFTER,
            )

        return MovieTagsRemoved(
            removed=[t["name"] for t in to_remove],
            tags=await self.tag_service.get_tags(user_id, movie.get("tag_ids", [])),
        )

    async def _attach_tags(
        self, movie_id: int, user_id: int, names: list[str]
    ) -> list[TagResponse]:
        movie = await self.movies.find_one({"_id": movie_id}, {"tag_ids": 1})
        attached = set(movie.get("tag_ids", [])) if movie else set()

        added = []
        for name in names:
            tag_doc = await self.tag_service.find_or_create(user_id, name)
            if tag_doc["_id"] in attached:
                continue
            attached.add(tag_doc["_id"])
            added.append(tag_to_response(tag_doc))

        if added:
            await self.movies.update_one(
                {"_id": movie_id},
                {
                    "$addToSet": {"tag_ids": {"$each": [t.id for t in added]}},
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
            )
        return added

    async def _get_catalog_movie(self, movie_id: int) -> dict[str, Any]:
        doc = await self.movies.find_one({"_id": movie_id})
        if not doc:
            raise NotFound("Movie not found")
        return doc


def _clean_tag_names(names: list[str]) -> list[str]:
    cleaned = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))
    if not cleaned:
        raise ValidationError("Tags array is required and must not be empty")
    return cleaned


def _entry_to_response(entry: dict[str, Any]) -> WatchEntry:
    return WatchEntry(
        id=entry["_id"],
        date_watched=entry.get("date_watched"),
        personal_rating=entry.get("personal_rating"),
        notes=entry.get("notes"),
        is_favorite=entry.get("is_favorite", False),
        watch_location=entry.get("watch_location"),
        created_at=entry["created_at"],
        updated_at=entry["updated_at"],
    )
