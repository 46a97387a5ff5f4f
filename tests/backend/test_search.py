"""
Tests for movie search.

These tests verify:
- Queries that look like TMDB ids resolve directly
- Failed direct lookups fall back to text search on the literal query
- Blank queries are rejected before any upstream call
- Text search tagging and defaults
- POST /tmdb/search responses
"""

import pytest


INCEPTION = {"id": 27205, "title": "Inception", "release_date": "2010-07-16"}


@pytest.fixture
def search_service(mock_tmdb_api):
    from movievault.services.search_service import SearchService
    return SearchService(mock_tmdb_api)


class TestSearchService:
    """Tests for SearchService.search."""

    @pytest.mark.asyncio
    async def test_numeric_query_resolves_by_direct_id(self, search_service, mock_tmdb_api):
        mock_tmdb_api.get_movie.return_value = INCEPTION

        result = await search_service.search("27205")

        mock_tmdb_api.get_movie.assert_awaited_once_with(27205)
        mock_tmdb_api.search_enhanced.assert_not_awaited()
        assert result.searchMethod == "direct_id"
        assert result.results == [INCEPTION]
        assert result.total_results == 1
        assert result.total_pages == 1

    @pytest.mark.asyncio
    async def test_tmdb_url_resolves_by_direct_id(self, search_service, mock_tmdb_api):
        mock_tmdb_api.get_movie.return_value = INCEPTION

        result = await search_service.search("https://www.themoviedb.org/movie/27205-inception")

        mock_tmdb_api.get_movie.assert_awaited_once_with(27205)
        assert result.searchMethod == "direct_id"

    @pytest.mark.asyncio
    async def test_unknown_id_falls_back_to_text_search(self, search_service, mock_tmdb_api):
        from movievault.services.tmdb_api import TMDBNotFound

        mock_tmdb_api.get_movie.side_effect = TMDBNotFound()
        mock_tmdb_api.search_enhanced.return_value = {
            "results": [{"id": 1, "title": "27205"}],
            "total_results": 1,
            "total_pages": 1,
        }

        result = await search_service.search("27205")

        mock_tmdb_api.search_enhanced.assert_awaited_once_with("27205")
        assert result.searchMethod == "enhanced"
        assert result.results[0]["title"] == "27205"

    @pytest.mark.asyncio
    async def test_upstream_failure_on_direct_lookup_falls_back(self, search_service, mock_tmdb_api):
        from movievault.services.tmdb_api import TMDBError

        mock_tmdb_api.get_movie.side_effect = TMDBError("TMDB API rate limit exceeded")
        mock_tmdb_api.search.return_value = {"results": []}

        result = await search_service.search("1917", enhanced=False)

        mock_tmdb_api.search.assert_awaited_once_with("1917")
        assert result.searchMethod == "basic"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    async def test_blank_query_rejected_without_upstream_call(
        self, search_service, mock_tmdb_api, query
    ):
        from movievault.core.errors import ValidationError

        with pytest.raises(ValidationError, match="Search query is required"):
            await search_service.search(query)

        mock_tmdb_api.get_movie.assert_not_awaited()
        mock_tmdb_api.search.assert_not_awaited()
        mock_tmdb_api.search_enhanced.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_title_query_skips_direct_lookup(self, search_service, mock_tmdb_api):
        mock_tmdb_api.search_enhanced.return_value = {
            "results": [INCEPTION], "total_results": 1, "total_pages": 1,
        }

        result = await search_service.search("Inception")

        mock_tmdb_api.get_movie.assert_not_awaited()
        assert result.searchMethod == "enhanced"
        assert result.results == [INCEPTION]

    @pytest.mark.asyncio
    async def test_missing_provider_fields_default_to_empty(self, search_service, mock_tmdb_api):
        mock_tmdb_api.search.return_value = {}

        result = await search_service.search("Nothing", enhanced=False)

        assert result.results == []
        assert result.total_results == 0
        assert result.total_pages == 0


class TestSearchRoute:
    """Tests for POST /tmdb/search."""

    @pytest.mark.asyncio
    async def test_search_returns_flat_response(
        self, async_client, login_as, test_user, tmdb_override
    ):
        login_as(test_user)
        tmdb_override.get_movie.return_value = INCEPTION

        response = await async_client.post("/tmdb/search", json={"query": "27205"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["searchMethod"] == "direct_id"
        assert data["results"][0]["id"] == 27205

    @pytest.mark.asyncio
    async def test_blank_query_returns_400(
        self, async_client, login_as, test_user, tmdb_override, assert_error_response
    ):
        login_as(test_user)

        response = await async_client.post("/tmdb/search", json={"query": "  "})

        assert_error_response(response, 400, "search query is required")
        tmdb_override.search_enhanced.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_text_search_failure_returns_500_and_is_recorded(
        self, async_client, login_as, test_user, tmdb_override, recorded_errors
    ):
        from movievault.services.tmdb_api import TMDBError

        login_as(test_user)
        tmdb_override.search_enhanced.side_effect = TMDBError(
            "TMDB API request failed: Name or service not known api.internal:8443"
        )

        response = await async_client.post("/tmdb/search", json={"query": "Inception"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "TMDB API error"}
        assert "api.internal" in str(recorded_errors.await_args.kwargs["error"])
        recorded_errors.assert_awaited_once()
        assert recorded_errors.await_args.kwargs["endpoint"] == "/tmdb/search"
        assert recorded_errors.await_args.kwargs["status_code"] == 500
