"""Grant cluster repository: reference embeddings and ranking candidates."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grant_monitor_core.exceptions import DecodeError
from grant_monitor_core.models.cluster import Candidate, GrantClusterSummary, StoredEmbedding
from grant_monitor_infra.db.models import GrantClusterModel
from grant_monitor_infra.vector.codec import to_raw_embedding


class ClusterRepository:
    """Read operations for grant clusters (implements ClusterStore)."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def create(self, model: GrantClusterModel) -> GrantClusterModel:
        """Create a grant cluster record."""
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_id(self, cluster_id: str) -> GrantClusterModel | None:
        """Retrieve a grant cluster by its ID."""
        return await self._session.get(GrantClusterModel, cluster_id)

    async def get_embedding(self, cluster_id: str) -> StoredEmbedding | None:
        """Load only the vector column of a cluster, or None if it doesn't exist."""
        stmt = select(GrantClusterModel.id, GrantClusterModel.vector).where(
            GrantClusterModel.id == cluster_id
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return StoredEmbedding(cluster_id=row.id, embedding=to_raw_embedding(row.vector))

    async def list_candidates(self, exclude_id: str, max_count: int) -> list[Candidate]:
        """List up to max_count clusters other than exclude_id, newest first."""
        stmt = (
            select(GrantClusterModel)
            .where(GrantClusterModel.id != exclude_id)
            .order_by(GrantClusterModel.created_at.desc())
            .limit(max_count)
        )
        result = await self._session.execute(stmt)
        candidates: list[Candidate] = []
        for model in result.scalars().all():
            try:
                embedding = to_raw_embedding(model.vector)
            except DecodeError:
                embedding = None
            candidates.append(
                Candidate(
                    cluster=GrantClusterSummary.model_validate(model),
                    embedding=embedding,
                )
            )
        return candidates
