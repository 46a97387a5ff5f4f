"""
Persist failed requests to system_db.error_logs for the admin dashboard.
"""
import logging
import traceback
from typing import Any, Optional

from pymongo.errors import PyMongoError

from movievault.database.connections import get_database
from movievault.database.databases import system_db
from movievault.database.sequences import next_id
from movievault.models.error_log import ErrorLogEntry

logger = logging.getLogger(__name__)


def _flatten_params(params: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not params:
        return None
    flat: dict[str, Any] = {}
    for key, value in params.items():
        if value is None or isinstance(value, (str, int, float, bool)):
            flat[key] = value
        else:
            flat[key] = str(value)
    return flat


async def record_error(
    endpoint: str,
    method: str,
    status_code: int,
    error: BaseException | str,
    user_id: Optional[int] = None,
    request_params: Optional[dict[str, Any]] = None,
) -> None:
    """
    Append an entry to the error log.

    Never raises: if the write fails the entry is only logged.
    """
    if isinstance(error, BaseException):
        message = str(error) or type(error).__name__
        stack_trace = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    else:
        message = error
        stack_trace = None

    entry = ErrorLogEntry(
        endpoint=endpoint,
        method=method,
        status_code=status_code,
        error_message=message,
        stack_trace=stack_trace,
        user_id=user_id,
        request_params=_flatten_params(request_params),
    )

    try:
        db = await get_database(system_db.DB_NAME)
        doc = entry.model_dump()
        doc["_id"] = await next_id(db, system_db.Collections.ERROR_LOGS)
        await db[system_db.Collections.ERROR_LOGS].insert_one(doc)
    except PyMongoError as e:
        logger.error(f"Failed to record error for {method} {endpoint}: {e}")
