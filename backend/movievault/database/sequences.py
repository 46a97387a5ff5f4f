"""
Integer id allocation.

Documents use integer ``_id`` values so that path parameters are plain
integers. Each database keeps one counter document per collection in its
``_counters`` collection.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

COUNTERS_COLLECTION = "_counters"


async def next_id(db: AsyncIOMotorDatabase, sequence: str) -> int:
    """Atomically increment and return the next id for ``sequence``."""
    counter = await db[COUNTERS_COLLECTION].find_one_and_update(
        {"_id": sequence},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(counter["seq"])
