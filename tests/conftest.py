"""
Global test fixtures for MovieVault.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor) with the real index definitions
- Test users and identity tokens
- FastAPI app and test clients
"""

import sys
from datetime import timedelta
from pathlib import Path
from typing import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.
    """
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")
    client = AsyncMongoMockClient()
    yield client
    client.close()


@pytest_asyncio.fixture
async def mock_auth_db(mock_async_mongo_client):
    """Provide mock auth_db database with its indexes."""
    from movievault.database.databases import auth_db
    from movievault.database.registry import create_collection_indexes

    db = mock_async_mongo_client[auth_db.DB_NAME]
    await create_collection_indexes(db, auth_db.Collections.INDEXES)
    yield db


@pytest_asyncio.fixture
async def mock_library_db(mock_async_mongo_client):
    """Provide mock library_db database with its indexes."""
    from movievault.database.databases import library_db
    from movievault.database.registry import create_collection_indexes

    db = mock_async_mongo_client[library_db.DB_NAME]
    await create_collection_indexes(db, library_db.Collections.INDEXES)
    yield db


@pytest_asyncio.fixture
async def mock_system_db(mock_async_mongo_client):
    """Provide mock system_db database with its indexes."""
    from movievault.database.databases import system_db
    from movievault.database.registry import create_collection_indexes

    db = mock_async_mongo_client[system_db.DB_NAME]
    await create_collection_indexes(db, system_db.Collections.INDEXES)
    yield db


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def test_user():
    """A regular local user."""
    from movievault.models.user import User, UserRole

    return User(
        id=1,
        external_auth_id="user_2abc",
        email="viewer@example.com",
        name="Viewer",
        role=UserRole.USER,
    )


@pytest.fixture
def other_user():
    """A second regular user, for ownership checks."""
    from movievault.models.user import User, UserRole

    return User(
        id=2,
        external_auth_id="user_9xyz",
        email="other@example.com",
        name="Other",
        role=UserRole.USER,
    )


@pytest.fixture
def admin_user():
    """An admin user."""
    from movievault.models.user import User, UserRole

    return User(
        id=99,
        external_auth_id="user_admin",
        email="admin@example.com",
        name="Admin",
        role=UserRole.ADMIN,
    )


@pytest.fixture
def make_token():
    """
    Factory for identity tokens signed with the configured secret.

    Usage:
        token = make_token("user_2abc", email="viewer@example.com")
    """
    from movievault.core.security import create_identity_token

    def _make(external_auth_id: str, expires_in: timedelta | None = None, **claims) -> str:
        return create_identity_token(external_auth_id, expires_delta=expires_in, **claims)

    return _make


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================

@pytest.fixture
def app():
    """
    FastAPI app for testing.

    Dependency overrides set by a test are cleared afterwards.
    """
    from movievault.main import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator:
    """
    TestClient for the FastAPI app.

    Not used as a context manager, so the lifespan (database start-up) does
    not run.
    """
    yield TestClient(app)


@pytest_asyncio.fixture
async def async_client(app):
    """
    Create an async test client.

    Use this for testing async endpoints.
    """
    from httpx import AsyncClient, ASGITransport

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
