"""
Tests for database connections and initialization.

These tests cover:
- MongoDB connection initialization
- Integer id allocation
- Database registry sync and index creation
"""

import pytest
from unittest.mock import patch, MagicMock


class TestMongoDBConnection:
    """Tests for MongoDB connection handling."""

    @pytest.mark.asyncio
    async def test_get_mongo_client_creates_connection_once(self):
        """get_mongo_client should create the client on first call only."""
        import movievault.database.connections as conn_module

        with patch("movievault.database.connections.AsyncIOMotorClient") as mock_client, \
             patch("movievault.database.connections.get_settings") as mock_settings:

            mock_settings.return_value.mongo_uri = "mongodb://test:27017"
            mock_instance = MagicMock()
            mock_client.return_value = mock_instance
            conn_module._mongo_client = None

            first = await conn_module.get_mongo_client()
            second = await conn_module.get_mongo_client()

            mock_client.assert_called_once_with("mongodb://test:27017", tz_aware=True)
            assert first is second is mock_instance
            conn_module._mongo_client = None

    @pytest.mark.asyncio
    async def test_close_connections_cleans_up(self):
        """close_connections should close and forget the client."""
        import movievault.database.connections as conn_module

        mock_mongo = MagicMock()
        conn_module._mongo_client = mock_mongo

        await conn_module.close_connections()

        mock_mongo.close.assert_called_once()
        assert conn_module._mongo_client is None


class TestSequences:
    """Tests for next_id."""

    @pytest.mark.asyncio
    async def test_ids_increment_per_sequence(self, mock_library_db):
        from movievault.database.sequences import next_id

        assert await next_id(mock_library_db, "vaults") == 1
        assert await next_id(mock_library_db, "vaults") == 2
        assert await next_id(mock_library_db, "tags") == 1


class TestDatabaseRegistry:
    """Tests for database registry synchronization."""

    @pytest.mark.asyncio
    async def test_sync_registry_records_every_database(self, mock_async_mongo_client):
        from movievault.database.registry import sync_registry

        await sync_registry(mock_async_mongo_client)
        await sync_registry(mock_async_mongo_client)

        registry = mock_async_mongo_client["system_db"]["db_registry"]
        names = sorted(doc["_id"] for doc in await registry.find().to_list(length=None))
        assert names == ["auth_db", "library_db", "system_db"]
        metadata = await mock_async_mongo_client["library_db"]["_metadata"].find_one({"_id": "db_metadata"})
        assert metadata["db_name"] == "library_db"


class TestIndexCreation:
    """Tests for index creation on collections."""

    @pytest.mark.asyncio
    async def test_vault_movie_pair_is_unique(self, mock_library_db):
        from pymongo.errors import DuplicateKeyError

        await mock_library_db.vault_movies.insert_one({"_id": 1, "vault_id": 1, "tmdb_id": 27205})

        with pytest.raises(DuplicateKeyError):
            await mock_library_db.vault_movies.insert_one({"_id": 2, "vault_id": 1, "tmdb_id": 27205})

    @pytest.mark.asyncio
    async def test_external_auth_id_is_unique(self, mock_auth_db):
        from pymongo.errors import DuplicateKeyError

        await mock_auth_db.users.insert_one({"_id": 1, "external_auth_id": "user_2abc"})

        with pytest.raises(DuplicateKeyError):
            await mock_auth_db.users.insert_one({"_id": 2, "external_auth_id": "user_2abc"})
