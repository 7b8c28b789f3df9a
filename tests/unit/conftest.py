"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Generator
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from grant_monitor_infra.db.models import Base
from grant_monitor_infra.db.session import create_session_factory
from grant_monitor_service.observability import disable_tracing
from tests.mocks.mock_settings import make_settings


@pytest.fixture
def mock_settings() -> MagicMock:
    """Return a MagicMock Settings with sensible defaults."""
    return make_settings()


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Create an in-memory SQLite session with the schema in place."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = create_session_factory(engine)
    async with factory() as sess:
        yield sess
    await engine.dispose()


@pytest.fixture(autouse=True)
def _reset_tracing() -> None:
    """Keep tracing disabled between tests."""
    disable_tracing()


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Restore root logger handlers replaced by configure_logging()."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
