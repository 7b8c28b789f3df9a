"""Shared constants for grant-monitor."""

from __future__ import annotations

# Database ranking functions, newest first. Each entry maps the function to
# its (vector, threshold, limit) argument names.
REMOTE_RANKER_ARGUMENTS: dict[str, tuple[str, str, str]] = {
    "find_similar_grant_clusters_with_scores": (
        "query_vector",
        "similarity_threshold",
        "result_limit",
    ),
    "find_similar_grant_clusters": (
        "query_embedding",
        "similarity_threshold",
        "match_count",
    ),
}

DEFAULT_REMOTE_RANKERS: tuple[str, ...] = tuple(REMOTE_RANKER_ARGUMENTS)

# Accepted names for the score column of a ranking function's rows, in
# priority order. The first non-null value wins.
SCORE_FIELD_ALIASES: tuple[str, ...] = ("similarity_score", "similarity")

# Per-function overrides of SCORE_FIELD_ALIASES.
REMOTE_RANKER_SCORE_FIELDS: dict[str, tuple[str, ...]] = {
    "find_similar_grant_clusters": ("similarity", "similarity_score"),
}

# Source label for results computed in-process.
LOCAL_SOURCE = "local"

SIMILARITY_MODES: tuple[str, ...] = ("auto", "local")
