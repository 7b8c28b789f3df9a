"""Similarity router - clusters similar to a reference grant cluster.

Endpoints:
- GET  /api/similarity?clusterId=&threshold=&limit=&mode=
- POST /api/similarity  (same parameters as a JSON body)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from grant_monitor_core.exceptions import NotFoundError
from grant_monitor_core.models.similarity import SimilarityOutcome, SimilarityQuery
from grant_monitor_service.api.dependencies import ResolverDependency, SettingsDependency
from grant_monitor_service.api.schemas import (
    ErrorResponse,
    SimilarityRequestBody,
    SimilarityResponse,
    parse_similarity_query,
)
from grant_monitor_service.similarity import SimilarityResolver

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=SimilarityResponse, responses=_ERROR_RESPONSES)
async def get_similar_clusters(
    resolver: ResolverDependency,
    settings: SettingsDependency,
    cluster_id: Annotated[str | None, Query(alias="clusterId")] = None,
    reference_id: Annotated[str | None, Query(alias="referenceId")] = None,
    threshold: Annotated[str | None, Query(description="Minimum similarity, 0-1")] = None,
    limit: Annotated[str | None, Query(description="Maximum results")] = None,
    mode: Annotated[str | None, Query(description="'auto' or 'local'")] = None,
) -> SimilarityResponse | JSONResponse:
    """Find grant clusters similar to the reference cluster."""
    query = parse_similarity_query(
        cluster_id or reference_id,
        threshold,
        limit,
        mode,
        default_threshold=settings.similarity_default_threshold,
        default_limit=settings.similarity_default_limit,
        max_limit=settings.similarity_max_limit,
    )
    return await _respond(resolver, query)


@router.post("", response_model=SimilarityResponse, responses=_ERROR_RESPONSES)
async def post_similar_clusters(
    resolver: ResolverDependency,
    settings: SettingsDependency,
    body: Annotated[SimilarityRequestBody, Body()],
) -> SimilarityResponse | JSONResponse:
    """Same as GET, with parameters in a JSON body."""
    query = parse_similarity_query(
        body.cluster_id if body.cluster_id is not None else body.reference_id,
        body.threshold,
        body.limit,
        body.mode,
        default_threshold=settings.similarity_default_threshold,
        default_limit=settings.similarity_default_limit,
        max_limit=settings.similarity_max_limit,
    )
    return await _respond(resolver, query)


async def _respond(
    resolver: SimilarityResolver, query: SimilarityQuery
) -> SimilarityResponse | JSONResponse:
    """Run the resolver and map its outcome onto an HTTP response."""
    outcome = await resolver.resolve(
        query.cluster_id, query.threshold, query.limit, mode=query.mode
    )
    if not outcome.success:
        return JSONResponse(
            status_code=_status_for(outcome),
            content={"error": outcome.error},
        )
    data = outcome.data or []
    return SimilarityResponse(data=data, count=len(data))


def _status_for(outcome: SimilarityOutcome) -> int:
    """HTTP status for a failed outcome."""
    if outcome.error_code == NotFoundError.code:
        return HTTP_404_NOT_FOUND
    return HTTP_500_INTERNAL_SERVER_ERROR
