"""
Backend-specific test fixtures and configuration.

These fixtures extend the global fixtures with helpers for testing FastAPI
routes against mock databases and a mocked TMDB client.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend"))


# =============================================================================
# Error Recording
# =============================================================================

@pytest.fixture(autouse=True)
def recorded_errors():
    """
    Replace the error recorder used by the exception handlers.

    Returns the AsyncMock so tests can assert on what was recorded.
    """
    with patch("movievault.main.record_error", new_callable=AsyncMock) as mock_record:
        yield mock_record


# =============================================================================
# Auth Overrides
# =============================================================================

@pytest.fixture
def login_as(app):
    """
    Authenticate every request as the given user.

    Usage:
        def test_route(client, login_as, test_user):
            login_as(test_user)
            client.get("/vaults")
    """
    from movievault.dependencies.auth import get_current_user

    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login


# =============================================================================
# Service Overrides
# =============================================================================

@pytest.fixture
def library_services(app, mock_library_db):
    """Route the library services to the mock library_db."""
    from movievault.routers.movies import get_movie_service
    from movievault.routers.tags import get_tag_service
    from movievault.routers.vaults import get_vault_service
    from movievault.routers.watchlist import get_watchlist_service
    from movievault.services.movie_service import MovieService
    from movievault.services.tag_service import TagService
    from movievault.services.vault_service import VaultService
    from movievault.services.watchlist_service import WatchlistService

    app.dependency_overrides[get_vault_service] = lambda: VaultService(mock_library_db)
    app.dependency_overrides[get_watchlist_service] = lambda: WatchlistService(mock_library_db)
    app.dependency_overrides[get_tag_service] = lambda: TagService(mock_library_db)
    app.dependency_overrides[get_movie_service] = lambda: MovieService(mock_library_db)
    return mock_library_db


@pytest.fixture
def admin_service_override(app, mock_system_db, mock_auth_db, mock_library_db):
    """Route AdminService to the mock databases."""
    from movievault.routers.admin import get_admin_service
    from movievault.services.admin_service import AdminService

    app.dependency_overrides[get_admin_service] = lambda: AdminService(
        mock_system_db, mock_auth_db, mock_library_db
    )
    return mock_system_db


# =============================================================================
# TMDB Fixtures
# =============================================================================

@pytest.fixture
def mock_tmdb_api():
    """
    Create a mocked TMDBClient.

    Network methods are AsyncMock; the pure helpers keep their real
    behaviour.
    """
    from movievault.services.tmdb_api import TMDBClient

    real = TMDBClient()
    api = MagicMock()
    api.search = AsyncMock()
    api.search_enhanced = AsyncMock()
    api.get_movie = AsyncMock()
    api.get_credits = AsyncMock()
    api.get_videos = AsyncMock()
    api.get_watch_providers = AsyncMock()
    api.extract_tmdb_id = TMDBClient.extract_tmdb_id
    api.find_director = TMDBClient.find_director
    api.find_best_trailer = TMDBClient.find_best_trailer
    api.youtube_url = TMDBClient.youtube_url
    api.youtube_embed_url = TMDBClient.youtube_embed_url
    api.youtube_thumbnail_url = TMDBClient.youtube_thumbnail_url
    api.poster_url = real.poster_url
    api.backdrop_url = real.backdrop_url
    return api


@pytest.fixture
def tmdb_override(app, mock_tmdb_api):
    """Serve the TMDB routes from mock_tmdb_api."""
    from movievault.routers.tmdb import get_search_service
    from movievault.services.search_service import SearchService
    from movievault.services.tmdb_api import get_tmdb_api

    app.dependency_overrides[get_tmdb_api] = lambda: mock_tmdb_api
    app.dependency_overrides[get_search_service] = lambda: SearchService(mock_tmdb_api)
    return mock_tmdb_api


# =============================================================================
# Response Assertion Helpers
# =============================================================================

@pytest.fixture
def assert_error_response():
    """Helper to assert the error envelope."""
    def _assert(response, status_code: int, error_contains: str = None):
        assert response.status_code == status_code
        data = response.json()
        assert data["success"] is False
        assert "error" in data
        if error_contains:
            assert error_contains.lower() in data["error"].lower()
    return _assert
