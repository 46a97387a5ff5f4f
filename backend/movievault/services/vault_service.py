"""
Vault service: user-owned named movie lists.

Every lookup filters on both the vault id and the caller's user id, so a
vault owned by someone else is indistinguishable from one that does not
exist.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from movievault.core.errors import Conflict, NotFound, ValidationError
from movievault.database.databases import library_db
from movievault.database.sequences import next_id
from movievault.models.movie import date_from_storage
from movievault.schemas.vault import (
    VaultCreate,
    VaultUpdate,
    VaultResponse,
    VaultSummary,
    VaultDetail,
    VaultMovieCreate,
    VaultMovieResponse,
    VaultMovieWithCollection,
)

PREVIEW_POSTER_COUNT = 4
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class VaultService:
    """Service for vault and vault movie operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with library database."""
        self.db = db
        self.vaults = db[library_db.Collections.VAULTS]
        self.vault_movies = db[library_db.Collections.VAULT_MOVIES]
        self.movies = db[library_db.Collections.MOVIES]
        self.user_movies = db[library_db.Collections.USER_MOVIES]

    # ==================== Vault CRUD ====================

    async def list_vaults(self, user_id: int) -> list[VaultSummary]:
        """List the user's vaults, most recently updated first."""
        cursor = self.vaults.find({"user_id": user_id}).sort([
            ("updated_at", DESCENDING), ("_id", DESCENDING),
        ])
        vaults = await cursor.to_list(length=None)
        return [await self._vault_summary(v) for v in vaults]

    async def create_vault(self, user_id: int, request: VaultCreate) -> VaultResponse:
        """
        Create a vault.

        Raises:
            ValidationError: If the name is blank
            Conflict: If the user already has a vault with this name
        """
        name = _clean_name(request.name)
        if name is None:
            raise ValidationError("Vault name is required")

        if await self.vaults.find_one({"user_id": user_id, "name": name}):
            raise Conflict("A vault with this name already exists")

        now = datetime.now(timezone.utc)
        vault_doc = {
            "_id": await next_id(self.db, library_db.Collections.VAULTS),
            "user_id": user_id,
            "name": name,
            "description": _clean_description(request.description),
            "created_at": now,
            "updated_at": now,
        }
        try:
            await self.vaults.insert_one(vault_doc)
        except DuplicateKeyError:
            raise Conflict("A vault with this name already exists")

        return _vault_to_response(vault_doc)

    async def get_vault(self, vault_id: int, user_id: int) -> VaultDetail:
        """
        Get a vault with its movies, newest first.

        Each movie is annotated with whether the same TMDB movie is also in
        the user's collection.
        """
        vault_doc = await self._get_owned_vault(vault_id, user_id)

        cursor = self.vault_movies.find({"vault_id": vault_id}).sort(NEWEST_FIRST)
        movie_docs = await cursor.to_list(length=None)

        collection = await self._collection_by_tmdb_id(user_id)
        movies = []
        for doc in movie_docs:
            movie = _movie_doc_fields(doc)
            collection_movie_id = collection.get(doc["tmdb_id"])
            movies.append(VaultMovieWithCollection(
                **movie,
                in_collection=collection_movie_id is not None,
                collection_movie_id=collection_movie_id,
            ))

        return VaultDetail(**_vault_fields(vault_doc), movies=movies)

    async def update_vault(
        self, vault_id: int, user_id: int, request: VaultUpdate
    ) -> VaultResponse:
        """Rename or re-describe a vault."""
        await self._get_owned_vault(vault_id, user_id)

        update_data: dict[str, Any] = {}
        if request.name is not None:
            name = _clean_name(request.name)
            if name is None:
                raise ValidationError("Vault name cannot be empty")
            duplicate = await self.vaults.find_one({
                "user_id": user_id, "name": name, "_id": {"$ne": vault_id},
            })
            if duplicate:
                raise Conflict("A vault with this name already exists")
            update_data["name"] = name
        if "description" in request.model_fields_set:
            update_data["description"] = _clean_description(request.description)
        update_data["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self.vaults.find_one_and_update(
                {"_id": vault_id, "user_id": user_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise Conflict("A vault with this name already exists")

        if not result:
            raise NotFound("Vault not found")
        return _vault_to_response(result)

    async def delete_vault(self, vault_id: int, user_id: int) -> None:
        """Delete a vault and all its movies."""
        await self._get_owned_vault(vault_id, user_id)
        await self.vault_movies.delete_many({"vault_id": vault_id})
        await self.vaults.delete_one({"_id": vault_id, "user_id": user_id})

    # ==================== Vault Movies ====================

    async def add_movie(
        self, vault_id: int, user_id: int, request: VaultMovieCreate
    ) -> VaultMovieResponse:
        """
        Add a movie to a vault.

        Raises:
            NotFound: If the vault does not exist or belongs to another user
            Conflict: If the vault already holds this TMDB id
        """
        await self._get_owned_vault(vault_id, user_id)

        existing = await self.vault_movies.find_one(
            {"vault_id": vault_id, "tmdb_id": request.tmdb_id}
        )
        if existing:
            raise Conflict("Movie already exists in this vault")

        now = datetime.now(timezone.utc)
        movie_doc = request.to_document()
        movie_doc.update({
            "_id": await next_id(self.db, library_db.Collections.VAULT_MOVIES),
            "vault_id": vault_id,
            "created_at": now,
        })
        try:
            await self.vault_movies.insert_one(movie_doc)
        except DuplicateKeyError:
            # Lost a race with a concurrent add of the same movie
            raise Conflict("Movie already exists in this vault")

        await self.vaults.update_one({"_id": vault_id}, {"$set": {"updated_at": now}})
        return VaultMovieResponse(**_movie_doc_fields(movie_doc))

    async def remove_movie(self, vault_id: int, movie_id: int, user_id: int) -> None:
        """Remove a movie from a vault."""
        await self._get_owned_vault(vault_id, user_id)

        result = await self.vault_movies.delete_one({"_id": movie_id, "vault_id": vault_id})
        if result.deleted_count == 0:
            raise NotFound("Movie not found in this vault")

        await self.vaults.update_one(
            {"_id": vault_id}, {"$set": {"updated_at": datetime.now(timezone.utc)}}
        )

    # ==================== Helpers ====================

    async def _get_owned_vault(self, vault_id: int, user_id: int) -> dict[str, Any]:
        vault_doc = await self.vaults.find_one({"_id": vault_id, "user_id": user_id})
        if not vault_doc:
            raise NotFound("Vault not found")
        return vault_doc

    async def _vault_summary(self, vault_doc: dict[str, Any]) -> VaultSummary:
        vault_id = vault_doc["_id"]
        movie_count = await self.vault_movies.count_documents({"vault_id": vault_id})
        cursor = self.vault_movies.find(
            {"vault_id": vault_id, "poster_path": {"$ne": None}},
            {"poster_path": 1},
        ).sort(NEWEST_FIRST).limit(PREVIEW_POSTER_COUNT)
        posters = [doc["poster_path"] for doc in await cursor.to_list(length=PREVIEW_POSTER_COUNT)]
        return VaultSummary(
            **_vault_fields(vault_doc),
            movie_count=movie_count,
            preview_posters=posters,
        )

    async def _collection_by_tmdb_id(self, user_id: int) -> dict[int, int]:
        """Map TMDB id -> catalog movie id for the user's collection."""
        movie_ids = await self.user_movies.distinct("movie_id", {"user_id": user_id})
        if not movie_ids:
            return {}
        cursor = self.movies.find(
            {"_id": {"$in": movie_ids}, "tmdb_id": {"$ne": None}},
            {"tmdb_id": 1},
        )
        return {doc["tmdb_id"]: doc["_id"] for doc in await cursor.to_list(length=None)}


def _clean_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    name = name.strip()
    return name or None


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    description = description.strip()
    return description or None


def _vault_fields(doc: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": doc["_id"],
        "user_id": doc["user_id"],
        "name": doc["name"],
        "description": doc.get("description"),
        "created_at": doc["created_at"],
        "updated_at": doc["updated_at"],
    }


def _vault_to_response(doc: dict[str, Any]) -> VaultResponse:
    return VaultResponse(**_vault_fields(doc))


def _movie_doc_fields(doc: dict[str, Any]) -> dict[str, Any]:
    fields = {k: v for k, v in doc.items() if k != "_id"}
    fields["id"] = doc["_id"]
    fields["release_date"] = date_from_storage(doc.get("release_date"))
    return fields
