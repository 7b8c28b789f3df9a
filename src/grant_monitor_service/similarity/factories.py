"""Factory functions for creating a similarity resolver from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from grant_monitor_infra.db.repositories.cluster_repo import ClusterRepository
from grant_monitor_infra.vector.remote import build_remote_rankers
from grant_monitor_service.similarity.fetcher import CandidateFetcher
from grant_monitor_service.similarity.resolver import SimilarityResolver

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from grant_monitor_core.config.settings import Settings


def create_resolver(session: AsyncSession, settings: Settings) -> SimilarityResolver:
    """Create a resolver bound to one request's session.

    Remote rankers come from ``settings.remote_rankers`` (empty on SQLite,
    which sends every request down the local path).
    """
    store = ClusterRepository(session)
    return SimilarityResolver(
        store=store,
        remote_rankers=build_remote_rankers(session, settings.remote_rankers),
        fetcher=CandidateFetcher(
            store,
            pool_max=settings.candidate_pool_max,
            pool_multiplier=settings.candidate_pool_multiplier,
        ),
    )
