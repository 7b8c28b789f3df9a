"""Request/response models and parameter validation for the similarity API."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from grant_monitor_core.constants import SIMILARITY_MODES
from grant_monitor_core.models.cluster import SimilarityResult
from grant_monitor_core.models.similarity import SimilarityQuery
from grant_monitor_service.api.errors import BadRequestError

MISSING_CLUSTER_ID = "Missing required parameter: clusterId"
INVALID_THRESHOLD = "Invalid threshold parameter. Must be a number between 0 and 1."
INVALID_LIMIT = "Invalid limit parameter. Must be a positive number between 1 and {max_limit}."
INVALID_MODE = "Invalid mode parameter. Must be one of: " + ", ".join(SIMILARITY_MODES) + "."


class SimilarityRequestBody(BaseModel):
    """POST body. Values are validated by ``parse_similarity_query``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    cluster_id: Any = Field(default=None, alias="clusterId")
    reference_id: Any = Field(default=None, alias="referenceId")
    threshold: Any = None
    limit: Any = None
    mode: Any = None


class SimilarityResponse(BaseModel):
    """Successful similarity response."""

    success: bool = True
    data: list[SimilarityResult]
    count: int


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str


def parse_similarity_query(
    cluster_id: Any,  # noqa: ANN401
    threshold: Any,  # noqa: ANN401
    limit: Any,  # noqa: ANN401
    mode: Any,  # noqa: ANN401
    *,
    default_threshold: float,
    default_limit: int,
    max_limit: int,
) -> SimilarityQuery:
    """Validate raw query/body values into a SimilarityQuery.

    Query-string values arrive as strings, JSON body values as their JSON
    types; both are accepted. Missing or empty values take the defaults.

    Raises:
        BadRequestError: with a client-facing message.
    """
    if not isinstance(cluster_id, str) or not cluster_id.strip():
        raise BadRequestError(MISSING_CLUSTER_ID)

    return SimilarityQuery(
        cluster_id=cluster_id.strip(),
        threshold=_parse_threshold(threshold, default_threshold),
        limit=_parse_limit(limit, default_limit, max_limit),
        mode=_parse_mode(mode),
    )


def _parse_threshold(value: Any, default: float) -> float:  # noqa: ANN401
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise BadRequestError(INVALID_THRESHOLD)
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError as exc:
            raise BadRequestError(INVALID_THRESHOLD) from exc
    elif isinstance(value, int | float):
        parsed = float(value)
    else:
        raise BadRequestError(INVALID_THRESHOLD)

    if math.isnan(parsed) or not 0.0 <= parsed <= 1.0:
        raise BadRequestError(INVALID_THRESHOLD)
    return parsed


def _parse_limit(value: Any, default: int, max_limit: int) -> int:  # noqa: ANN401
    message = INVALID_LIMIT.format(max_limit=max_limit)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise BadRequestError(message)
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError as exc:
            raise BadRequestError(message) from exc
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    else:
        raise BadRequestError(message)

    if not 1 <= parsed <= max_limit:
        raise BadRequestError(message)
    return parsed


def _parse_mode(value: Any) -> str:  # noqa: ANN401
    if value is None or value == "":
        return "auto"
    if value not in SIMILARITY_MODES:
        raise BadRequestError(INVALID_MODE)
    return str(value)
