"""
Admin diagnostics service: error log inspection and user management.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from movievault.config import get_settings
from movievault.core.errors import NotFound, ValidationError
from movievault.database.databases import auth_db, library_db, system_db
from movievault.schemas.admin import (
    AdminUserDetail,
    EndpointCount,
    ErrorCounts,
    ErrorListResponse,
    ErrorLogResponse,
    ErrorLogUser,
    ErrorPagination,
    ErrorStatsResponse,
    ErrorTrend,
    StatusCodeCount,
)
from movievault.schemas.user import AdminUserResponse, AdminUserUpdate, UserStats
from movievault.services.vault_service import VaultService

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]
TOP_ENDPOINTS = 5
RECENT_ERRORS = 5


def parse_status_code(value: Optional[str]) -> Optional[int]:
    """Return the status code filter, or None when absent or not an integer."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class AdminService:
    """Service for admin-only diagnostics."""

    def __init__(
        self,
        system_db_instance: AsyncIOMotorDatabase,
        auth_db_instance: AsyncIOMotorDatabase,
        library_db_instance: AsyncIOMotorDatabase,
    ):
        self.error_logs = system_db_instance[system_db.Collections.ERROR_LOGS]
        self.users = auth_db_instance[auth_db.Collections.USERS]
        self.library_db = library_db_instance
        self.settings = get_settings()

    # ==================== Error Log ====================

    async def list_errors(
        self,
        endpoint: Optional[str] = None,
        status_code: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> ErrorListResponse:
        """
        Page through the error log, newest first.

        Filters are conjunctive: ``endpoint`` is a substring match and
        ``status_code`` an exact match, applied only when it parses as an
        integer. ``limit`` is capped at ``admin_errors_max_limit``.

        Raises:
            ValidationError: If limit < 1 or offset < 0
        """
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        if offset < 0:
            raise ValidationError("offset must not be negative")
        limit = min(limit, self.settings.admin_errors_max_limit)

        query: dict[str, Any] = {}
        if endpoint:
            query["endpoint"] = {"$regex": re.escape(endpoint)}
        code = parse_status_code(status_code)
        if code is not None:
            query["status_code"] = code

        total = await self.error_logs.count_documents(query)
        cursor = self.error_logs.find(query).sort(NEWEST_FIRST).skip(offset).limit(limit)
        docs = await cursor.to_list(length=limit)

        return ErrorListResponse(
            errors=await self._with_users(docs),
            pagination=ErrorPagination(
                total=total,
                limit=limit,
                offset=offset,
                hasMore=offset + limit < total,
            ),
        )

    async def error_stats(self) -> ErrorStatsResponse:
        """Error counts, 24h trend, top endpoints, recent errors and status codes."""
        now = datetime.now(timezone.utc)
        last_24h = now - timedelta(hours=24)
        previous_24h = last_24h - timedelta(hours=24)

        async def count_since(start: datetime, end: Optional[datetime] = None) -> int:
            window: dict[str, Any] = {"$gte": start}
            if end is not None:
                window["$lt"] = end
            return await self.error_logs.count_documents({"created_at": window})

        total_24h = await count_since(last_24h)
        previous_count = await count_since(previous_24h, last_24h)
        change = ((total_24h - previous_count) / previous_count * 100) if previous_count else 0.0
        if change > 0:
            direction = "increasing"
        elif change < 0:
            direction = "decreasing"
        else:
            direction = "stable"

        top_endpoints = await self.error_logs.aggregate([
            {"$group": {"_id": "$endpoint", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": TOP_ENDPOINTS},
        ]).to_list(length=TOP_ENDPOINTS)

        by_status = await self.error_logs.aggregate([
            {"$group": {"_id": "$status_code", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]).to_list(length=None)

        recent_cursor = self.error_logs.find().sort(NEWEST_FIRST).limit(RECENT_ERRORS)
        recent = await recent_cursor.to_list(length=RECENT_ERRORS)

        return ErrorStatsResponse(
            counts=ErrorCounts(
                last_24h=total_24h,
                last_7d=await count_since(now - timedelta(days=7)),
                last_30d=await count_since(now - timedelta(days=30)),
                total=await self.error_logs.count_documents({}),
            ),
            trend=ErrorTrend(error_rate_change_24h=change, direction=direction),
            top_endpoints=[EndpointCount(endpoint=e["_id"], count=e["count"]) for e in top_endpoints],
            recent_errors=await self._with_users(recent),
            by_status_code=[StatusCodeCount(status_code=s["_id"], count=s["count"]) for s in by_status],
        )

    async def _with_users(self, docs: list[dict[str, Any]]) -> list[ErrorLogResponse]:
        """Join each entry with the minimal fields of its user."""
        user_ids = {doc["user_id"] for doc in docs if doc.get("user_id") is not None}
        users: dict[int, ErrorLogUser] = {}
        if user_ids:
            cursor = self.users.find({"_id": {"$in": list(user_ids)}}, {"name": 1, "email": 1})
            for user in await cursor.to_list(length=None):
                users[user["_id"]] = ErrorLogUser(
                    id=user["_id"], name=user.get("name"), email=user.get("email")
                )

        return [
            ErrorLogResponse(
                id=doc["_id"],
                endpoint=doc["endpoint"],
                method=doc.get("method", ""),
                status_code=doc["status_code"],
                error_message=doc.get("error_message", ""),
                stack_trace=doc.get("stack_trace"),
                user_id=doc.get("user_id"),
                request_params=doc.get("request_params"),
                created_at=doc["created_at"],
                user=users.get(doc.get("user_id")),
            )
            for doc in docs
        ]

    # ==================== Users ====================

    async def list_users(self) -> list[AdminUserResponse]:
        """All users, newest first, with content counts."""
        cursor = self.users.find().sort(NEWEST_FIRST)
        return [
            AdminUserResponse(**_user_fields(doc), stats=await self._user_stats(doc["_id"]))
            for doc in await cursor.to_list(length=None)
        ]

    async def get_user(self, user_id: int) -> AdminUserDetail:
        doc = await self.users.find_one({"_id": user_id})
        if not doc:
            raise NotFound("User not found")

        vaults = await VaultService(self.library_db).list_vaults(user_id)
        return AdminUserDetail(
            **_user_fields(doc),
            stats=await self._user_stats(user_id),
            vaults=vaults,
        )

    async def update_user(self, user_id: int, request: AdminUserUpdate) -> AdminUserResponse:
        """Change a user's role, name or email."""
        update_data = request.model_dump(exclude_none=True, mode="json")
        update_data["updated_at"] = datetime.now(timezone.utc)

        doc = await self.users.find_one_and_update(
            {"_id": user_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFound("User not found")
        return AdminUserResponse(**_user_fields(doc), stats=await self._user_stats(user_id))

    async def _user_stats(self, user_id: int) -> UserStats:
        lib = self.library_db
        return UserStats(
            movies=await lib[library_db.Collections.USER_MOVIES].count_documents({"user_id": user_id}),
            watchlist=await lib[library_db.Collections.WATCHLIST_MOVIES].count_documents({"user_id": user_id}),
            vaults=await lib[library_db.Collections.VAULTS].count_documents({"user_id": user_id}),
            tags=await lib[library_db.Collections.TAGS].count_documents({"user_id": user_id}),
        )


def _user_fields(doc: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": doc["_id"],
        "external_auth_id": doc["external_auth_id"],
        "email": doc.get("email"),
        "name": doc.get("name"),
        "role": doc.get("role", "user"),
        "created_at": doc["created_at"],
        "updated_at": doc.get("updated_at", doc["created_at"]),
        "last_login_at": doc.get("last_login_at"),
    }
