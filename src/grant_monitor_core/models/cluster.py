"""Grant cluster models: stored summary, ranking candidate and similarity result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grant_monitor_core.models.embedding import RawEmbedding


class GrantClusterSummary(BaseModel):
    """Descriptive fields of a grant cluster (everything except its vector)."""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: str = Field(description="Unique cluster identifier")
    grant_name: str = Field(description="Canonical grant name for the cluster")
    grant_amount: str | None = Field(default=None, description="Funding amount as scraped")
    grant_date: str | None = Field(default=None, description="Deadline or award date text")
    grant_url: str | None = Field(default=None, description="Source page URL")
    grant_description: str | None = Field(default=None, description="Grant description")
    grant_organisation: str | None = Field(default=None, description="Funding organisation")
    grant_eligibility: str | None = Field(default=None, description="Eligibility criteria")
    created_at: datetime | None = Field(default=None, description="When the cluster was created")
    raw_grant_count: int = Field(default=0, ge=0, description="Raw grants merged into the cluster")

    @field_validator("id", "grant_amount", "grant_date", mode="before")
    @classmethod
    def stringify(cls, value: object) -> object:
        """Database rows may carry UUIDs, numerics or dates for these columns."""
        if value is None or isinstance(value, str):
            return value
        return str(value)


class SimilarityResult(GrantClusterSummary):
    """A cluster paired with its similarity to the reference cluster."""

    similarity_score: float = Field(description="Cosine similarity to the reference")


@dataclass
class Candidate:
    """A cluster considered for ranking, with its undecoded embedding."""

    cluster: GrantClusterSummary
    embedding: RawEmbedding | None


@dataclass
class StoredEmbedding:
    """The reference cluster's embedding as persisted (None when absent)."""

    cluster_id: str
    embedding: RawEmbedding | None
