"""
Database registry management.
Ensures all databases and collections are registered on startup.
"""
import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

from movievault.database.databases import auth_db, library_db, system_db

logger = logging.getLogger(__name__)

# All database manifests
ALL_DB_MANIFESTS = [
    auth_db.DB_MANIFEST,
    library_db.DB_MANIFEST,
    system_db.DB_MANIFEST,
]

# Index definitions per database
ALL_DB_INDEXES = {
    auth_db.DB_NAME: auth_db.Collections.INDEXES,
    library_db.DB_NAME: library_db.Collections.INDEXES,
    system_db.DB_NAME: system_db.Collections.INDEXES,
}


async def sync_registry(client: AsyncIOMotorClient) -> None:
    """
    Synchronize the database registry on application startup.
    Ensures all databases are registered in system_db.db_registry.
    """
    sys_db = client[system_db.DB_NAME]
    registry_collection = sys_db[system_db.Collections.DB_REGISTRY]

    for manifest in ALL_DB_MANIFESTS:
        db_name = manifest["db_name"]
        now = datetime.now(timezone.utc)

        await registry_collection.update_one(
            {"_id": db_name},
            {
                "$set": {
                    "purpose": manifest["purpose"],
                    "collections": manifest["collections"],
                    "access_level": manifest["access_level"],
                    "schema_version": "1.0",
                    "updated_at": now,
                },
                "$setOnInsert": {
                    "created_at": now,
                },
            },
            upsert=True,
        )

        # Ensure _metadata collection exists in each database
        db = client[db_name]
        await db["_metadata"].update_one(
            {"_id": "db_metadata"},
            {
                "$set": {
                    "db_name": db_name,
                    "last_updated_at": now,
                },
                "$setOnInsert": {
                    "created_at": now,
                },
            },
            upsert=True,
        )


async def create_collection_indexes(
    db: AsyncIOMotorDatabase, indexes: dict[str, list[dict]]
) -> None:
    """Create the given index definitions on one database."""
    for collection_name, index_defs in indexes.items():
        collection = db[collection_name]
        for index_def in index_defs:
            keys = index_def["keys"]
            kwargs = {k: v for k, v in index_def.items() if k != "keys"}
            try:
                await collection.create_index(keys, **kwargs)
            except OperationFailure as e:
                # Index might already exist with different options
                logger.warning(f"Index on {db.name}.{collection_name} not created: {e}")


async def create_indexes(client: AsyncIOMotorClient) -> None:
    """Create necessary indexes for all databases."""
    for db_name, indexes in ALL_DB_INDEXES.items():
        await create_collection_indexes(client[db_name], indexes)
