"""Health check endpoint."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from grant_monitor_infra.db.session import check_database

router = APIRouter()


@router.get("/health")
async def health(request: Request, response: Response) -> dict[str, str]:
    """Liveness check, with the grant_clusters database when the engine is up.

    An unreachable database reports ``degraded`` with a 503.
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        database = "unknown"
    elif await check_database(engine):
        database = "ok"
    else:
        database = "unavailable"

    status = "healthy"
    if database == "unavailable":
        status = "degraded"
        response.status_code = HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": status,
        "database": database,
        "timestamp": datetime.now(UTC).isoformat(),
    }
