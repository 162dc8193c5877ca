from __future__ import annotations

import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .engine.dates import utc_now
from .exceptions import AppError
from .logging_setup import setup_logging
from .repositories import Clock, Repository, create_repository
from .routers import lists as lists_router
from .routers import queries as queries_router
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "lists", "description": "CRUD operations for task lists, list contents and per-list statistics."},
    {"name": "tasks", "description": "CRUD operations for single tasks, completion and deadline changes."},
    {
        "name": "queries",
        "description": "Filtering, sorting, pagination, grouping, statistics and productivity insights over tasks.",
    },
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build a FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        repository: Store to use; built from settings when omitted.
        clock: Callable returning the current aware UTC datetime.

    Returns:
        The configured application. The store, settings and clock are kept on
        ``app.state`` so each application is fully isolated from any other.
    """
    settings = settings or get_settings()
    clock = clock or utc_now
    setup_logging(settings.log_level)
    started = time.monotonic()

    app = FastAPI(
        title="Todo API",
        description="Task lists with deadlines, priorities, queries and productivity analytics.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.repository = repository if repository is not None else create_repository(settings, clock=clock)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """
        Return a consistent JSON structure for application errors.

        Response format:
            {
                "error": "<code, e.g. NOT_FOUND>",
                "message": "<human readable message>",
                "detail": <error specific detail or null>
            }
        """
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message, "detail": exc.to_detail()},
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
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    # PUBLIC_INTERFACE
    @app.get(
        "/health/ready",
        summary="Readiness check",
        tags=["health"],
        responses={503: {"description": "The store cannot be reached"}},
    )
    def readiness_check():
        """
        Readiness endpoint: runs one cheap read against the store.

        Returns:
            200 with ``ready: true`` and the backend name, or 503 with
            ``ready: false`` and the storage error message.
        """
        timestamp = clock().isoformat()
        try:
            app.state.repository.list_lists(settings.default_owner_id)
        except AppError as exc:
            logger.warning("Readiness check failed: %s", exc.message)
            return JSONResponse(
                status_code=503,
                content={"ready": False, "timestamp": timestamp, "error": exc.message},
            )
        return {"ready": True, "timestamp": timestamp, "backend": settings.persistence_backend}

    # PUBLIC_INTERFACE
    @app.get("/health/live", summary="Liveness check", tags=["health"])
    def liveness_check():
        """
        Liveness endpoint.

        Returns:
            alive flag, timestamp, whole seconds since the app was built and the process id.
        """
        return {
            "alive": True,
            "timestamp": clock().isoformat(),
            "uptime": int(time.monotonic() - started),
            "pid": os.getpid(),
        }

    # queries first: its static paths must win over /{task_id}
    app.include_router(lists_router.router)
    app.include_router(queries_router.router)
    app.include_router(tasks_router.router)

    logger.info("Application created with %s backend", settings.persistence_backend)
    return app


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    # `todo_api.main:app` is built on first access so importing this module
    # never opens a store
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
