"""
Tests for admin diagnostics.

These tests cover:
- Error log filtering, ordering, pagination and user join
- Error statistics
- User listing and role updates
- Admin route access
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio


async def seed_errors(system_db, entries):
    """Insert error log entries with ids 1..n; ``age`` is minutes before now."""
    now = datetime.now(timezone.utc)
    for i, entry in enumerate(entries, start=1):
        await system_db.error_logs.insert_one({
            "_id": i,
            "endpoint": entry.get("endpoint", "/vaults"),
            "method": entry.get("method", "GET"),
            "status_code": entry.get("status_code", 500),
            "error_message": entry.get("error_message", "boom"),
            "user_id": entry.get("user_id"),
            "created_at": now - timedelta(minutes=entry.get("age", i)),
        })


@pytest.fixture
def admin_service(mock_system_db, mock_auth_db, mock_library_db):
    from movievault.services.admin_service import AdminService
    return AdminService(mock_system_db, mock_auth_db, mock_library_db)


# =============================================================================
# Error Log
# =============================================================================

class TestListErrors:
    """Tests for AdminService.list_errors."""

    @pytest.mark.asyncio
    async def test_status_code_filter_returns_only_matches(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [
            {"status_code": 500}, {"status_code": 404}, {"status_code": 500}, {"status_code": 400},
        ])

        result = await admin_service.list_errors(status_code="500")

        assert {e.status_code for e in result.errors} == {500}
        assert result.pagination.total == 2

    @pytest.mark.asyncio
    async def test_non_integer_status_code_is_ignored(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [{"status_code": 500}, {"status_code": 404}])

        result = await admin_service.list_errors(status_code="abc")

        assert result.pagination.total == 2

    @pytest.mark.asyncio
    async def test_endpoint_is_substring_match(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [
            {"endpoint": "/vaults/3/movies"}, {"endpoint": "/tmdb/search"}, {"endpoint": "/vaults"},
        ])

        result = await admin_service.list_errors(endpoint="vaults")

        assert sorted(e.endpoint for e in result.errors) == ["/vaults", "/vaults/3/movies"]

    @pytest.mark.asyncio
    async def test_endpoint_filter_is_not_a_regex(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [{"endpoint": "/vaults"}, {"endpoint": "/tmdb/search"}])

        result = await admin_service.list_errors(endpoint=".*")

        assert result.errors == []

    @pytest.mark.asyncio
    async def test_filters_are_conjunctive(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [
            {"endpoint": "/vaults", "status_code": 500},
            {"endpoint": "/vaults", "status_code": 404},
            {"endpoint": "/tmdb/search", "status_code": 500},
        ])

        result = await admin_service.list_errors(endpoint="/vaults", status_code="500")

        assert result.pagination.total == 1

    @pytest.mark.asyncio
    async def test_newest_first(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [{"age": 30}, {"age": 1}, {"age": 10}])

        result = await admin_service.list_errors()

        assert [e.id for e in result.errors] == [2, 3, 1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,offset,has_more", [
        (2, 0, True),
        (2, 2, True),
        (2, 3, False),
        (5, 0, False),
        (4, 1, False),
    ])
    async def test_has_more(self, admin_service, mock_system_db, limit, offset, has_more):
        await seed_errors(mock_system_db, [{} for _ in range(5)])

        result = await admin_service.list_errors(limit=limit, offset=offset)

        assert result.pagination.hasMore is has_more
        assert result.pagination.total == 5
        assert len(result.errors) == min(limit, max(5 - offset, 0))

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, admin_service, mock_system_db):
        await seed_errors(mock_system_db, [{}])

        result = await admin_service.list_errors(limit=10_000)

        assert result.pagination.limit == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,offset", [(0, 0), (-1, 0), (10, -1)])
    async def test_bad_paging_rejected(self, admin_service, limit, offset):
        from movievault.core.errors import ValidationError

        with pytest.raises(ValidationError):
            await admin_service.list_errors(limit=limit, offset=offset)

    @pytest.mark.asyncio
    async def test_entries_joined_with_user(self, admin_service, mock_system_db, mock_auth_db):
        await mock_auth_db.users.insert_one({
            "_id": 1, "external_auth_id": "user_2abc", "email": "viewer@example.com",
            "name": "Viewer", "role": "user",
        })
        await seed_errors(mock_system_db, [{"user_id": 1}, {"user_id": None}])

        result = await admin_service.list_errors()

        by_id = {e.id: e for e in result.errors}
        assert by_id[1].user.email == "viewer@example.com"
        assert by_id[1].user.id == 1
        assert by_id[2].user is None


class TestErrorStats:
    """Tests for AdminService.error_stats."""

    @pytest.mark.asyncio
    async def test_counts_trend_and_breakdowns(self, admin_service, mock_system_db):
        day = 24 * 60
        await seed_errors(mock_system_db, [
            {"age": 10, "endpoint": "/vaults", "status_code": 500},
            {"age": 20, "endpoint": "/vaults", "status_code": 500},
            {"age": 30, "endpoint": "/tmdb/search", "status_code": 500},
            {"age": day + 60, "endpoint": "/vaults", "status_code": 404},
            {"age": 10 * day, "endpoint": "/movies", "status_code": 500},
            {"age": 60 * day, "endpoint": "/movies", "status_code": 400},
        ])

        stats = await admin_service.error_stats()

        assert stats.counts.last_24h == 3
        assert stats.counts.last_7d == 4
        assert stats.counts.last_30d == 5
        assert stats.counts.total == 6
        assert stats.trend.error_rate_change_24h == pytest.approx(200.0)
        assert stats.trend.direction == "increasing"
        assert stats.top_endpoints[0].endpoint == "/vaults"
        assert stats.top_endpoints[0].count == 3
        assert stats.by_status_code[0].status_code == 500
        assert stats.by_status_code[0].count == 4
        assert [e.id for e in stats.recent_errors] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_empty_log_is_stable(self, admin_service):
        stats = await admin_service.error_stats()

        assert stats.counts.total == 0
        assert stats.trend.direction == "stable"
        assert stats.top_endpoints == []


# =============================================================================
# Users
# =============================================================================

class TestAdminUsers:
    """Tests for admin user management."""

    @pytest_asyncio.fixture
    async def seeded_users(self, mock_auth_db, mock_library_db):
        now = datetime.now(timezone.utc)
        await mock_auth_db.users.insert_many([
            {"_id": 1, "external_auth_id": "a", "email": "a@example.com", "role": "user",
             "created_at": now - timedelta(days=2), "updated_at": now - timedelta(days=2)},
            {"_id": 2, "external_auth_id": "b", "email": "b@example.com", "role": "user",
             "created_at": now - timedelta(days=1), "updated_at": now - timedelta(days=1)},
        ])
        await mock_library_db.user_movies.insert_many([
            {"_id": 1, "user_id": 1, "movie_id": 1},
            {"_id": 2, "user_id": 1, "movie_id": 2},
        ])
        await mock_library_db.vaults.insert_one({
            "_id": 1, "user_id": 1, "name": "Noir", "created_at": now, "updated_at": now,
        })

    @pytest.mark.asyncio
    async def test_list_users_newest_first_with_stats(self, admin_service, seeded_users):
        users = await admin_service.list_users()

        assert [u.id for u in users] == [2, 1]
        assert users[1].stats.movies == 2
        assert users[1].stats.vaults == 1
        assert users[0].stats.movies == 0

    @pytest.mark.asyncio
    async def test_get_user_includes_vaults(self, admin_service, seeded_users):
        user = await admin_service.get_user(1)

        assert user.external_auth_id == "a"
        assert [v.name for v in user.vaults] == ["Noir"]

    @pytest.mark.asyncio
    async def test_get_unknown_user_not_found(self, admin_service, seeded_users):
        from movievault.core.errors import NotFound

        with pytest.raises(NotFound):
            await admin_service.get_user(404)

    @pytest.mark.asyncio
    async def test_update_role(self, admin_service, seeded_users, mock_auth_db):
        from movievault.schemas.user import AdminUserUpdate

        user = await admin_service.update_user(2, AdminUserUpdate(role="admin"))

        assert user.role == "admin"
        assert (await mock_auth_db.users.find_one({"_id": 2}))["role"] == "admin"


# =============================================================================
# Admin Routes
# =============================================================================

class TestAdminRoutes:
    """Tests for /admin endpoints."""

    @pytest.mark.asyncio
    async def test_errors_with_status_filter(
        self, async_client, login_as, admin_user, admin_service_override
    ):
        login_as(admin_user)
        await seed_errors(admin_service_override, [{"status_code": 500}, {"status_code": 404}])

        response = await async_client.get("/admin/errors?status_code=500&limit=1")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [e["status_code"] for e in data["errors"]] == [500]
        assert data["pagination"] == {"total": 1, "limit": 1, "offset": 0, "hasMore": False}

    @pytest.mark.asyncio
    async def test_negative_offset_returns_400(
        self, async_client, login_as, admin_user, admin_service_override, assert_error_response
    ):
        login_as(admin_user)

        response = await async_client.get("/admin/errors?offset=-1")

        assert_error_response(response, 400)

    @pytest.mark.asyncio
    async def test_invalid_role_returns_400(
        self, async_client, login_as, admin_user, admin_service_override, assert_error_response
    ):
        login_as(admin_user)

        response = await async_client.patch("/admin/users/1", json={"role": "superuser"})

        assert_error_response(response, 400)

    @pytest.mark.asyncio
    async def test_update_unknown_user_returns_404(
        self, async_client, login_as, admin_user, admin_service_override, assert_error_response
    ):
        login_as(admin_user)

        response = await async_client.patch("/admin/users/12345", json={"role": "admin"})

        assert_error_response(response, 404, "user not found")
