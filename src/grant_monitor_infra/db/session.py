"""Async session factory, schema creation and connectivity check."""

from __future__ import annotations

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from grant_monitor_infra.db.models import Base

logger = structlog.get_logger()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create the grant_clusters table on SQLite.

    On Postgres the table and ranking functions belong to the clustering
    pipeline, so nothing is created.
    """
    if engine.dialect.name != "sqlite":
        logger.info("init_db_skipped", dialect=engine.dialect.name)
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database(engine: AsyncEngine) -> bool:
    """Return True if a trivial query succeeds on the engine."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("database_unreachable", error=str(exc))
        return False
    return True
