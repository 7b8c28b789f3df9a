"""Similarity request and outcome models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

from grant_monitor_core.exceptions import SimilarityError
from grant_monitor_core.models.cluster import SimilarityResult

SimilarityMode = Literal["auto", "local"]


class SimilarityQuery(BaseModel):
    """A validated similarity request."""

    cluster_id: str = Field(min_length=1, description="Reference cluster id")
    threshold: float = Field(default=0.3, ge=0.0, le=1.0, description="Minimum score")
    limit: int = Field(default=20, ge=1, description="Maximum results")
    mode: SimilarityMode = Field(
        default="auto", description="'local' skips the database ranking functions"
    )


class SimilarityOutcome(BaseModel):
    """Terminal state of one resolution: ranked results or an error message."""

    success: bool
    data: list[SimilarityResult] | None = None
    error: str | None = None
    error_code: str | None = None
    source: str | None = Field(
        default=None, description="Ranking function name, or 'local' for the fallback"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        """Number of results (0 on failure)."""
        return len(self.data or [])

    @classmethod
    def succeeded(cls, data: list[SimilarityResult], source: str) -> SimilarityOutcome:
        """Build a successful outcome."""
        return cls(success=True, data=data, source=source)

    @classmethod
    def failed(cls, error: SimilarityError) -> SimilarityOutcome:
        """Build a failed outcome from a similarity error."""
        return cls(success=False, error=str(error), error_code=error.code)
