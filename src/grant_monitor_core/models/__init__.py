"""Domain models for grant-monitor."""

from grant_monitor_core.models.cluster import (
    Candidate,
    GrantClusterSummary,
    SimilarityResult,
    StoredEmbedding,
)
from grant_monitor_core.models.embedding import (
    NumericEmbedding,
    RawEmbedding,
    TextEmbedding,
)
from grant_monitor_core.models.similarity import (
    SimilarityMode,
    SimilarityOutcome,
    SimilarityQuery,
)

__all__ = [
    "Candidate",
    "GrantClusterSummary",
    "NumericEmbedding",
    "RawEmbedding",
    "SimilarityMode",
    "SimilarityOutcome",
    "SimilarityQuery",
    "SimilarityResult",
    "StoredEmbedding",
    "TextEmbedding",
]
