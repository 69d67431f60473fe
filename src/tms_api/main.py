from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .db import Database
from .errors import DecodeError, NotFoundError
from .routers import comments as comments_router
from .routers import tasks as tasks_router
from .schemas import HealthOut
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, read, update, delete and assign tasks with their checklist items.",
    },
    {"name": "comments", "description": "Comments attached to tasks."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The store handle is opened when the app starts, published on
    `app.state.database` for the repository dependencies, and closed on
    shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(settings.db_path)
        database.open()
        app.state.database = database
        logger.info("Starting %s server version=%s", settings.env, __version__)
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="Task Management System API",
        description="Manage tasks, assign users to them and attach comments.",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": exc.errors(),
            },
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": f"{exc.entity} not found"})

    @app.exception_handler(DecodeError)
    @app.exception_handler(sqlite3.Error)
    async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log store and decode failures and answer with a generic 500."""
        logger.error(
            "Store failure on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "StoreError",
                "message": "The server encountered a problem and could not process your request",
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/healthcheck", response_model=HealthOut, summary="Health Check", tags=["health"])
    def health_check() -> HealthOut:
        """
        Health check endpoint.

        Returns:
            Service status, the configured environment and the service version.
        """
        return HealthOut(status="available", environment=settings.env, version=__version__)

    app.include_router(tasks_router.router)
    app.include_router(comments_router.router)
    return app


app = create_app()
