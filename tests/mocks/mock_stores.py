"""In-memory ClusterStore and RemoteRanker test doubles."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from grant_monitor_core.constants import SCORE_FIELD_ALIASES
from grant_monitor_core.models.cluster import Candidate, StoredEmbedding


class FakeClusterStore:
    """ClusterStore backed by dicts, recording calls."""

    def __init__(
        self,
        references: Mapping[str, StoredEmbedding] | None = None,
        candidates: Sequence[Candidate] = (),
        *,
        embedding_error: Exception | None = None,
        candidates_error: Exception | None = None,
    ) -> None:
        self.references = dict(references or {})
        self.candidates = list(candidates)
        self.embedding_error = embedding_error
        self.candidates_error = candidates_error
        self.list_calls: list[tuple[str, int]] = []

    async def get_embedding(self, cluster_id: str) -> StoredEmbedding | None:
        if self.embedding_error is not None:
            raise self.embedding_error
        return self.references.get(cluster_id)

    async def list_candidates(self, exclude_id: str, max_count: int) -> list[Candidate]:
        self.list_calls.append((exclude_id, max_count))
        if self.candidates_error is not None:
            raise self.candidates_error
        return [c for c in self.candidates if c.cluster.id != exclude_id][:max_count]


class FakeRemoteRanker:
    """RemoteRanker returning canned rows or raising a canned error."""

    def __init__(
        self,
        name: str,
        rows: Sequence[Mapping[str, Any]] = (),
        error: Exception | None = None,
        score_fields: tuple[str, ...] = SCORE_FIELD_ALIASES,
    ) -> None:
        self.name = name
        self.rows = list(rows)
        self.error = error
        self.score_fields = score_fields
        self.calls: list[tuple[list[float], float, int]] = []

    async def rank(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[Mapping[str, Any]]:
        self.calls.append((vector, threshold, limit))
        if self.error is not None:
            raise self.error
        return self.rows
