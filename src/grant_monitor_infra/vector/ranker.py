"""In-process ranking of candidate clusters against a reference vector."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from grant_monitor_core.exceptions import DecodeError
from grant_monitor_core.models.cluster import Candidate, SimilarityResult
from grant_monitor_infra.vector.codec import decode_embedding
from grant_monitor_infra.vector.similarity import cosine_similarity

logger = structlog.get_logger()


class SimilarityRanker:
    """Score, filter, sort and truncate candidates by cosine similarity."""

    def rank(
        self,
        reference: Sequence[float],
        candidates: Sequence[Candidate],
        threshold: float,
        limit: int,
    ) -> list[SimilarityResult]:
        """Rank candidates against the reference vector.

        Candidates without an embedding, with an undecodable one, or with a
        different dimension are skipped. Partial data is expected here, so
        skipped candidates are only counted in a debug log.

        Args:
            reference: The reference cluster's decoded vector.
            candidates: Clusters to score.
            threshold: Scores strictly below this are dropped.
            limit: Maximum number of results.

        Returns:
            Results sorted by similarity_score descending, at most ``limit``.
        """
        scored: list[tuple[Candidate, float]] = []
        skipped = {"no_embedding": 0, "undecodable": 0, "dimension_mismatch": 0}

        for candidate in candidates:
            if candidate.embedding is None:
                skipped["no_embedding"] += 1
                continue
            try:
                vector = decode_embedding(candidate.embedding)
            except DecodeError:
                skipped["undecodable"] += 1
                continue
            if len(vector) != len(reference):
                skipped["dimension_mismatch"] += 1
                continue

            score = cosine_similarity(reference, vector)
            if score >= threshold:
                scored.append((candidate, score))

        scored.sort(key=lambda pair: pair[1], reverse=True)

        logger.debug(
            "similarity_ranked",
            candidates=len(candidates),
            matched=len(scored),
            returned=min(len(scored), limit),
            **skipped,
        )

        return [
            SimilarityResult(
                **candidate.cluster.model_dump(),
                similarity_score=score,
            )
            for candidate, score in scored[:limit]
        ]
