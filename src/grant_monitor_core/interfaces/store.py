"""Abstract cluster store interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from grant_monitor_core.models.cluster import Candidate, StoredEmbedding


@runtime_checkable
class ClusterStore(Protocol):
    """Read access to grant clusters and their embeddings."""

    async def get_embedding(self, cluster_id: str) -> StoredEmbedding | None:
        """Return the cluster's stored embedding, or None if the cluster is unknown."""
        ...

    async def list_candidates(self, exclude_id: str, max_count: int) -> list[Candidate]:
        """List up to max_count clusters other than exclude_id."""
        ...
