"""Dependency injection for API endpoints.

Each request gets its own AsyncSession, and the resolver built on it, so
concurrent similarity requests share nothing but the engine's pool.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from grant_monitor_core.config.settings import Settings
from grant_monitor_service.similarity import SimilarityResolver, create_resolver


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session from the application's session factory."""
    async with request.app.state.session_factory() as session:
        yield session


SettingsDependency = Annotated[Settings, Depends(get_settings)]
SessionDependency = Annotated[AsyncSession, Depends(get_session)]


def get_resolver(
    session: SessionDependency, settings: SettingsDependency
) -> SimilarityResolver:
    """Resolver bound to the request's session."""
    return create_resolver(session, settings)


ResolverDependency = Annotated[SimilarityResolver, Depends(get_resolver)]
