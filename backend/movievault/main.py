"""
MovieVault Backend - FastAPI Application

A personal movie collection: TMDB search, vaults, watchlist, tags and an
admin error-log dashboard.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from movievault.config import get_settings
from movievault.core.error_logger import record_error
from movievault.core.errors import AppError
from movievault.core.logging_setup import setup_logging
from movievault.database.connections import get_mongo_client, close_connections
from movievault.database.registry import sync_registry, create_indexes
from movievault.routers import admin, health, movies, tags, tmdb, users, vaults, watchlist
from movievault.schemas.common import ErrorResponse
from movievault.services.tmdb_api import close_tmdb_api

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Configure logging
    - Sync database registry
    - Create indexes

    Shutdown:
    - Close the TMDB client and database connections
    """
    setup_logging()
    logger.info("Starting up MovieVault Backend...")

    try:
        client = await get_mongo_client()
        await sync_registry(client)
        await create_indexes(client)
        logger.info("Database registry synced and indexes created")
    except PyMongoError as e:
        logger.warning(f"Database initialization warning: {e}")

    yield

    logger.info("Shutting down MovieVault Backend...")
    await close_tmdb_api()
    await close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="MovieVault API",
    description="""
## MovieVault API

A personal movie collection backed by The Movie Database (TMDB).

### Features
- **Collection**: Movies you have watched, with ratings, notes and tags
- **Vaults**: Named movie lists
- **Watchlist**: Movies to watch next
- **Search**: TMDB search by title, TMDB id or TMDB URL
- **Admin**: Error log and user management

### Authentication
Protected endpoints take the identity provider's session token, either as a
header or as a query parameter:
```
Authorization: Bearer your_jwt_token
GET /vaults?token=your_jwt_token
```

### Responses
Every response uses the envelope `{"success": true, "data": ...}` or
`{"success": false, "error": "..."}`.
    """,
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Error Handling ====================


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def _record(request: Request, status_code: int, error: BaseException) -> None:
    params = {**request.path_params, **dict(request.query_params)}
    params.pop("token", None)
    await record_error(
        endpoint=request.url.path,
        method=request.method,
        status_code=status_code,
        error=error,
        user_id=getattr(request.state, "user_id", None),
        request_params=params,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        await _record(request, exc.status_code, exc)
        # Upstream details stay in the log
        return _error_response(exc.status_code, exc.default_message)
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    await _record(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# Include routers
app.include_router(health.router)
app.include_router(users.router)
app.include_router(vaults.router)
app.include_router(watchlist.router)
app.include_router(movies.router)
app.include_router(tags.router)
app.include_router(tmdb.router)
app.include_router(admin.router)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "MovieVault API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
