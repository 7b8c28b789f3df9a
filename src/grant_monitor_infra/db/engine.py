"""Async database engine factory for the grant_clusters store."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from grant_monitor_core.config.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create an async SQLAlchemy engine based on settings.

    SQLite in-memory databases use one shared connection. Postgres
    connections carry the service name and a statement timeout.
    """
    if settings.db_backend == "sqlite":
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if make_url(settings.database_url).database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(settings.database_url, echo=False, **kwargs)

    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        connect_args={"server_settings": _server_settings(settings)},
    )


def _server_settings(settings: Settings) -> dict[str, str]:
    """Session-level Postgres parameters sent by asyncpg on connect."""
    server_settings = {"application_name": settings.otel_service_name}
    if settings.db_statement_timeout_ms:
        server_settings["statement_timeout"] = str(settings.db_statement_timeout_ms)
    return server_settings
