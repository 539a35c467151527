# src/agora/main.py
"""Main entry point for the Agora application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from agora.api.v1 import (
    comments_router,
    posts_router,
    users_router,
    votes_router,
)
from agora.core.errors import (
    ConflictError,
    ForumError,
    InvalidInputError,
    NotFoundError,
    StorageFailureError,
)
from agora.core.settings import settings
from agora.db.session import Database
from agora.services.comment_tree import CommentTreeAssembler
from agora.services.voting import VotingEngine

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Agora API",
    description="Discussion forum voting, karma and comment threads",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(users_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")

_ERROR_STATUS: dict[type[ForumError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageFailureError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Translate core exceptions into HTTP rejections."""
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, StorageFailureError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": "Service temporarily unavailable, please retry"},
            headers={"Retry-After": "1"},
        )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def init_services(target: FastAPI, database: Database) -> None:
    """Attach the persistence client and the core services to ``target``."""
    target.state.database = database
    target.state.voting_engine = VotingEngine(database)
    target.state.comment_tree = CommentTreeAssembler(database)


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if getattr(app.state, "database", None) is None:
        database = Database.from_settings(settings)
        if settings.auto_create_tables:
            database.create_tables()
        init_services(app, database)
        app.state.owns_database = True
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if getattr(app.state, "owns_database", False):
        app.state.database.close()
        app.state.database = None
        app.state.owns_database = False


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Agora API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("agora.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
