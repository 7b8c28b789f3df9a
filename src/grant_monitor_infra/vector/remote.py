"""Database-side ranking functions and their result normalisation."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from grant_monitor_core.constants import (
    REMOTE_RANKER_ARGUMENTS,
    REMOTE_RANKER_SCORE_FIELDS,
    SCORE_FIELD_ALIASES,
)
from grant_monitor_core.exceptions import CapabilityMissingError
from grant_monitor_core.interfaces.ranker import RemoteRanker
from grant_monitor_core.models.cluster import SimilarityResult

logger = structlog.get_logger()

# Error message signatures meaning "the ranking function does not exist".
CAPABILITY_MISSING_SIGNATURES: tuple[re.Pattern[str], ...] = (
    re.compile(r"function .* does not exist", re.IGNORECASE | re.DOTALL),  # Postgres
    re.compile(r"UndefinedFunction", re.IGNORECASE),  # asyncpg / psycopg error class
    # pgvector not installed: the statement's own CAST to vector fails first
    re.compile(r"type \"vector\" does not exist", re.IGNORECASE),
    re.compile(r"could not find the function", re.IGNORECASE),  # PostgREST
    re.compile(r"no such function", re.IGNORECASE),  # SQLite
)


def is_capability_missing(exc: BaseException) -> bool:
    """Classify an error as "ranking capability not available"."""
    if isinstance(exc, CapabilityMissingError):
        return True
    message = f"{type(exc).__name__}: {exc}"
    return any(pattern.search(message) for pattern in CAPABILITY_MISSING_SIGNATURES)


def extract_score(row: Mapping[str, Any], score_fields: Sequence[str]) -> float:
    """Return the first non-null score among the accepted field names, else 0.0."""
    for field in score_fields:
        value = row.get(field)
        if value is not None:
            return float(value)
    return 0.0


def normalize_rows(
    rows: Sequence[Mapping[str, Any]],
    score_fields: Sequence[str] = SCORE_FIELD_ALIASES,
) -> list[SimilarityResult]:
    """Map heterogeneous ranking-function rows onto SimilarityResult."""
    results: list[SimilarityResult] = []
    for row in rows:
        fields = {k: v for k, v in row.items() if k not in score_fields}
        if fields.get("raw_grant_count") is None:
            fields["raw_grant_count"] = 0
        results.append(
            SimilarityResult(**fields, similarity_score=extract_score(row, score_fields))
        )
    return results


class SqlFunctionRanker:
    """Ranks clusters by calling a Postgres set-returning function.

    The call runs inside a SAVEPOINT so that a missing or failing function
    leaves the request's transaction usable for the next strategy.
    """

    def __init__(
        self,
        session: AsyncSession,
        name: str,
        arguments: tuple[str, str, str],
        score_fields: tuple[str, ...] = SCORE_FIELD_ALIASES,
    ) -> None:
        """Initialize with a session, the function name and its argument names."""
        self._session = session
        self.name = name
        self.score_fields = score_fields
        vector_arg, threshold_arg, limit_arg = arguments
        self._statement = text(
            f"SELECT * FROM {name}("  # noqa: S608 -- name validated as identifier
            f"{vector_arg} => CAST(:vector AS vector), "
            f"{threshold_arg} => :threshold, "
            f"{limit_arg} => :limit)"
        )

    async def rank(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[Mapping[str, Any]]:
        """Call the function and return its rows as mappings."""
        params = {"vector": json.dumps(vector), "threshold": threshold, "limit": limit}
        async with self._session.begin_nested():
            result = await self._session.execute(self._statement, params)
            rows = [dict(row._mapping) for row in result]
        logger.debug("remote_ranker_rows", ranker=self.name, rows=len(rows))
        return rows


def build_remote_rankers(session: AsyncSession, names: Sequence[str]) -> list[RemoteRanker]:
    """Create rankers for the configured function names, in priority order.

    Unknown names use the argument names of the newest function.
    """
    default_arguments = next(iter(REMOTE_RANKER_ARGUMENTS.values()))
    return [
        SqlFunctionRanker(
            session,
            name,
            REMOTE_RANKER_ARGUMENTS.get(name.rsplit(".", 1)[-1], default_arguments),
            REMOTE_RANKER_SCORE_FIELDS.get(name.rsplit(".", 1)[-1], SCORE_FIELD_ALIASES),
        )
        for name in names
    ]
