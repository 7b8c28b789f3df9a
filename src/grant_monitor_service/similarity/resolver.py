"""Similarity resolution: remote ranking functions with a local fallback."""

from __future__ import annotations

import time
from collections.abc import Sequence

import structlog

from grant_monitor_core.constants import LOCAL_SOURCE
from grant_monitor_core.exceptions import (
    DecodeError,
    FetchError,
    InternalError,
    NoEmbeddingError,
    NotFoundError,
    RemoteError,
    SimilarityError,
)
from grant_monitor_core.interfaces.ranker import RemoteRanker
from grant_monitor_core.interfaces.store import ClusterStore
from grant_monitor_core.models.cluster import SimilarityResult
from grant_monitor_core.models.similarity import SimilarityMode, SimilarityOutcome
from grant_monitor_infra.vector.codec import decode_embedding
from grant_monitor_infra.vector.ranker import SimilarityRanker
from grant_monitor_infra.vector.remote import is_capability_missing, normalize_rows
from grant_monitor_service.observability import trace_similarity_request, trace_strategy
from grant_monitor_service.similarity.fetcher import CandidateFetcher

logger = structlog.get_logger()


class SimilarityResolver:
    """Find clusters similar to a reference cluster.

    Resolution steps:

    1. Load and decode the reference cluster's vector.
    2. Try each remote ranker in priority order. A ranker whose capability
       is missing passes control to the next one; any other failure ends the
       resolution with a RemoteError.
    3. When every ranker is missing (or none are configured), fetch a bounded
       candidate slice and rank it in-process.

    ``resolve`` never raises: every failure becomes a failed SimilarityOutcome.
    The resolver holds no per-request state, but its store and rankers are
    usually bound to one request's database session.
    """

    def __init__(
        self,
        store: ClusterStore,
        remote_rankers: Sequence[RemoteRanker] = (),
        fetcher: CandidateFetcher | None = None,
        ranker: SimilarityRanker | None = None,
    ) -> None:
        """Initialize with a store, rankers in priority order, and the local engine."""
        self._store = store
        self._remote_rankers = list(remote_rankers)
        self._fetcher = fetcher or CandidateFetcher(store)
        self._ranker = ranker or SimilarityRanker()

    async def resolve(
        self,
        cluster_id: str,
        threshold: float = 0.3,
        limit: int = 20,
        mode: SimilarityMode = "auto",
    ) -> SimilarityOutcome:
        """Resolve clusters similar to ``cluster_id``.

        Args:
            cluster_id: Reference cluster id (non-empty).
            threshold: Minimum similarity, validated upstream to [0, 1].
            limit: Maximum results, validated upstream to [1, 100].
            mode: "local" skips the remote rankers.

        Returns:
            A successful outcome with ranked results, or a failed one.
        """
        start = time.monotonic()
        try:
            async with trace_similarity_request(cluster_id, threshold, limit):
                results, source = await self._resolve(cluster_id, threshold, limit, mode)
        except SimilarityError as exc:
            logger.warning(
                "similarity_failed",
                cluster_id=cluster_id,
                error_code=exc.code,
                error=str(exc),
            )
            return SimilarityOutcome.failed(exc)
        except Exception as exc:
            logger.exception("similarity_unexpected_error", cluster_id=cluster_id)
            return SimilarityOutcome.failed(
                InternalError(f"An unexpected error occurred: {exc}")
            )

        logger.info(
            "similarity_resolved",
            cluster_id=cluster_id,
            source=source,
            count=len(results),
            duration_seconds=round(time.monotonic() - start, 3),
        )
        return SimilarityOutcome.succeeded(results, source)

    async def _resolve(
        self,
        cluster_id: str,
        threshold: float,
        limit: int,
        mode: SimilarityMode,
    ) -> tuple[list[SimilarityResult], str]:
        """Run the resolution steps, raising SimilarityError on failure."""
        reference = await self._load_reference(cluster_id)

        if mode == "auto":
            remote = await self._try_remote_rankers(reference, threshold, limit)
            if remote is not None:
                return remote

        return await self._rank_locally(cluster_id, reference, threshold, limit), LOCAL_SOURCE

    async def _load_reference(self, cluster_id: str) -> list[float]:
        """Load and decode the reference cluster's vector."""
        try:
            stored = await self._store.get_embedding(cluster_id)
        except SimilarityError:
            raise
        except Exception as exc:
            raise FetchError(f"Failed to fetch reference cluster: {exc}") from exc

        if stored is None:
            raise NotFoundError("Reference cluster not found")
        if stored.embedding is None:
            raise NoEmbeddingError("Reference cluster has no vector data")

        try:
            return decode_embedding(stored.embedding)
        except DecodeError as exc:
            raise DecodeError("Failed to parse vector data") from exc

    async def _try_remote_rankers(
        self, reference: list[float], threshold: float, limit: int
    ) -> tuple[list[SimilarityResult], str] | None:
        """Try each remote ranker in order.

        Returns:
            Results and the ranker name, or None when every ranker is missing.

        Raises:
            RemoteError: if an existing ranker fails.
        """
        for remote in self._remote_rankers:
            try:
                async with trace_strategy(remote.name):
                    rows = await remote.rank(reference, threshold, limit)
            except Exception as exc:
                if is_capability_missing(exc):
                    logger.info("remote_ranker_missing", ranker=remote.name)
                    continue
                raise RemoteError(f"Failed to calculate similarity: {exc}") from exc

            return normalize_rows(rows, remote.score_fields), remote.name

        if self._remote_rankers:
            logger.info(
                "similarity_local_fallback",
                reason="remote rankers not found",
                tried=[r.name for r in self._remote_rankers],
            )
        return None

    async def _rank_locally(
        self,
        cluster_id: str,
        reference: list[float],
        threshold: float,
        limit: int,
    ) -> list[SimilarityResult]:
        """Fetch a bounded candidate slice and rank it in-process."""
        async with trace_strategy(LOCAL_SOURCE):
            candidates = await self._fetcher.fetch_candidates(cluster_id, limit)
            return self._ranker.rank(reference, candidates, threshold, limit)
