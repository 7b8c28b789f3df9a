"""Bounded candidate retrieval for the local fallback."""

from __future__ import annotations

import structlog

from grant_monitor_core.exceptions import FetchError
from grant_monitor_core.interfaces.store import ClusterStore
from grant_monitor_core.models.cluster import Candidate

logger = structlog.get_logger()


class CandidateFetcher:
    """Fetch a bounded slice of clusters to score in-process.

    The local path does not scan the whole corpus: it scores at most
    ``min(pool_max, limit * pool_multiplier)`` clusters, trading recall for
    latency when the database ranking functions are unavailable.
    """

    def __init__(
        self,
        store: ClusterStore,
        pool_max: int = 50,
        pool_multiplier: int = 3,
    ) -> None:
        """Initialize with a cluster store and the candidate cap parameters."""
        self._store = store
        self._pool_max = pool_max
        self._pool_multiplier = pool_multiplier

    def candidate_cap(self, limit: int) -> int:
        """Number of candidates to fetch for a request of ``limit`` results."""
        return min(self._pool_max, limit * self._pool_multiplier)

    async def fetch_candidates(self, exclude_id: str, limit: int) -> list[Candidate]:
        """Fetch candidates other than the reference cluster.

        Raises:
            FetchError: if the store read fails.
        """
        max_count = self.candidate_cap(limit)
        try:
            candidates = await self._store.list_candidates(exclude_id, max_count)
        except Exception as exc:
            raise FetchError(f"Failed to fetch clusters: {exc}") from exc

        # The reference never ranks against itself.
        candidates = [c for c in candidates if c.cluster.id != exclude_id][:max_count]
        logger.debug("candidates_fetched", count=len(candidates), cap=max_count)
        return candidates
