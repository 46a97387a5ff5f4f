"""
Tests for error recording.
"""

from unittest.mock import AsyncMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError


@pytest.fixture
def system_db_patch(mock_system_db):
    """Point the recorder at the mock system_db."""
    async def _get_database(db_name):
        return mock_system_db

    with patch("movievault.core.error_logger.get_database", _get_database):
        yield mock_system_db


class TestRecordError:
    """Tests for movievault.core.error_logger.record_error."""

    @pytest.mark.asyncio
    async def test_exception_is_stored_with_stack_trace(self, system_db_patch):
        from movievault.core.error_logger import record_error

        try:
            raise RuntimeError("database exploded")
        except RuntimeError as e:
            await record_error("/vaults/3", "GET", 500, e, user_id=1,
                               request_params={"vault_id": 3, "filters": ["a"]})

        doc = await system_db_patch.error_logs.find_one({})
        assert doc["_id"] == 1
        assert doc["endpoint"] == "/vaults/3"
        assert doc["status_code"] == 500
        assert doc["error_message"] == "database exploded"
        assert "RuntimeError" in doc["stack_trace"]
        assert doc["user_id"] == 1
        assert doc["request_params"] == {"vault_id": 3, "filters": "['a']"}

    @pytest.mark.asyncio
    async def test_message_only(self, system_db_patch):
        from movievault.core.error_logger import record_error

        await record_error("/tmdb/search", "POST", 500, "Failed to search TMDB")

        doc = await system_db_patch.error_logs.find_one({})
        assert doc["error_message"] == "Failed to search TMDB"
        assert doc["stack_trace"] is None
        assert doc["request_params"] is None

    @pytest.mark.asyncio
    async def test_write_failure_is_only_logged(self, caplog):
        from movievault.core.error_logger import record_error

        failing = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        with patch("movievault.core.error_logger.get_database", failing):
            await record_error("/vaults", "GET", 500, "boom")

        assert "Failed to record error" in caplog.text
