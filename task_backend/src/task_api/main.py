from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from .db import Database
from .errors import TaskNotFoundError
from .logging_setup import request_id_var, setup_logging
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

GREETING = "Hello from the Task API!"
REQUEST_ID_HEADER = "X-Request-ID"

openapi_tags = [
    {"name": "root", "description": "Service greeting."},
    {
        "name": "tasks",
        "description": "Create, list, fetch, complete and delete tasks.",
    },
]


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent 400 JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        logger.info("Rejected %s %s: %d validation error(s)", request.method, request.url.path, len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(TaskNotFoundError)
    async def not_found_exception_handler(request: Request, exc: TaskNotFoundError) -> JSONResponse:
        logger.debug("Task id=%s not found", exc.task_id)
        return JSONResponse(status_code=404, content={"error": TaskNotFoundError.message})

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "StoreError",
                "message": "The task store could not complete the request",
            },
        )


def _install_openapi(app: FastAPI) -> None:
    """
    Validation failures are answered with 400 (see validation_exception_handler),
    so drop the 422 responses FastAPI documents on every operation by default.
    """

    def openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema
        schema = FastAPI.openapi(app)
        for path_item in schema.get("paths", {}).values():
            for operation in path_item.values():
                if isinstance(operation, dict):
                    operation.get("responses", {}).pop("422", None)
        components = schema.get("components", {}).get("schemas", {})
        for name in ("HTTPValidationError", "ValidationError"):
            components.pop(name, None)
        app.openapi_schema = schema
        return schema

    app.openapi = openapi  # type: ignore[method-assign]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration to use; read from the environment when omitted.
        database: Pre-built store handle; created from settings.database_url when omitted.

    Returns:
        A FastAPI app whose 'state.database' is the store used by every request.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.create_tables:
            database.create_all()
        yield
        database.dispose()

    app = FastAPI(
        title="Task API",
        description="Minimal CRUD service for a list of tasks backed by a relational store.",
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag the request with an id and log one line per request."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get(
        "/",
        summary="Root",
        tags=["root"],
        response_class=PlainTextResponse,
        responses={200: {"description": "Root fetched successfully"}},
    )
    def root() -> str:
        """
        Plain-text greeting.
        """
        return GREETING

    app.include_router(tasks_router.router)
    _install_openapi(app)
    return app


app = create_app()
