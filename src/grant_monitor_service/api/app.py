"""FastAPI application factory for the grant-monitor similarity API."""

from __future__ import annotations

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from grant_monitor_core.config.settings import Settings
from grant_monitor_infra.db.engine import create_engine
from grant_monitor_infra.db.session import create_session_factory, init_db
from grant_monitor_service.api.errors import (
    APIError,
    api_error_handler,
    unexpected_error_handler,
)
from grant_monitor_service.api.routers import health, similarity
from grant_monitor_service.observability import bind_request_context, clear_request_context

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the database engine on startup and dispose of it on shutdown."""
    settings: Settings = app.state.settings
    engine = create_engine(settings)
    if settings.db_backend == "sqlite":
        await init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info(
        "api_startup",
        db_backend=settings.db_backend,
        remote_rankers=settings.remote_rankers,
    )
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("api_shutdown")


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Malformed bodies get the same ``{"error": ...}`` shape as other 400s."""
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application.

    Args:
        settings: Application settings; loaded from the environment if omitted.
    """
    settings = settings or Settings()
    app = FastAPI(
        title="grant-monitor",
        description="Similar grant clusters for the grant pipeline dashboard",
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        bind_request_context(request_id=request_id, path=request.url.path)
        start = time.monotonic()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "request_complete",
                method=request.method,
                status=response.status_code,
                duration_seconds=round(time.monotonic() - start, 3),
            )
            return response
        finally:
            clear_request_context()

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(health.router, tags=["health"])
    app.include_router(similarity.router, prefix="/api/similarity", tags=["similarity"])
    return app
