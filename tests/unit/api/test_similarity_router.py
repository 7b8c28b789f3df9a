"""Tests for the similarity API."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from grant_monitor_core.exceptions import (
    DecodeError,
    NoEmbeddingError,
    NotFoundError,
    RemoteError,
)
from grant_monitor_core.models.similarity import SimilarityOutcome
from grant_monitor_infra.db.engine import create_engine
from grant_monitor_infra.db.repositories.cluster_repo import ClusterRepository
from grant_monitor_infra.db.session import create_session_factory, init_db
from grant_monitor_service.api import create_app
from grant_monitor_service.api.dependencies import get_resolver
from grant_monitor_service.api.errors import UNEXPECTED_ERROR_MESSAGE
from grant_monitor_service.api.schemas import (
    INVALID_MODE,
    INVALID_THRESHOLD,
    MISSING_CLUSTER_ID,
)
from tests.mocks.mock_factories import make_cluster_model, make_similarity_result
from tests.mocks.mock_settings import make_real_settings


def _make_app(
    tmp_path: Path, outcome: SimilarityOutcome | None = None, **settings: object
) -> tuple[FastAPI, MagicMock]:
    """Create an app whose resolver is a mock returning ``outcome``."""
    app = create_app(make_real_settings(tmp_path, **settings))
    resolver = MagicMock()
    resolver.resolve = AsyncMock(
        return_value=outcome or SimilarityOutcome.succeeded([], "local")
    )
    app.dependency_overrides[get_resolver] = lambda: resolver
    return app, resolver


@pytest.mark.unit
class TestParameterValidation:
    """400 responses for invalid parameters."""

    def test_missing_cluster_id(self, tmp_path: Path) -> None:
        """clusterId is required."""
        app, resolver = _make_app(tmp_path)
        response = TestClient(app).get("/api/similarity")
        assert response.status_code == 400
        assert response.json() == {"error": MISSING_CLUSTER_ID}
        resolver.resolve.assert_not_called()

    @pytest.mark.parametrize("threshold", ["abc", "-0.1", "1.5", "nan"])
    def test_invalid_threshold(self, tmp_path: Path, threshold: str) -> None:
        """threshold must be a number in [0, 1]."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).get(
            "/api/similarity", params={"clusterId": "c1", "threshold": threshold}
        )
        assert response.status_code == 400
        assert response.json() == {"error": INVALID_THRESHOLD}

    @pytest.mark.parametrize("limit", ["0", "101", "ten", "2.5"])
    def test_invalid_limit(self, tmp_path: Path, limit: str) -> None:
        """limit must be an integer in [1, max]."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).get(
            "/api/similarity", params={"clusterId": "c1", "limit": limit}
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid limit parameter")
        assert "between 1 and 100" in response.json()["error"]

    def test_limit_bound_follows_settings(self, tmp_path: Path) -> None:
        """The maximum limit comes from settings."""
        app, _ = _make_app(tmp_path, similarity_max_limit=30, similarity_default_limit=10)
        client = TestClient(app)
        assert client.get("/api/similarity?clusterId=c1&limit=30").status_code == 200
        response = client.get("/api/similarity?clusterId=c1&limit=31")
        assert response.status_code == 400
        assert "between 1 and 30" in response.json()["error"]

    def test_invalid_mode(self, tmp_path: Path) -> None:
        """mode must be auto or local."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).get("/api/similarity?clusterId=c1&mode=remote")
        assert response.status_code == 400
        assert response.json() == {"error": INVALID_MODE}

    def test_malformed_body(self, tmp_path: Path) -> None:
        """A body that is not JSON is a 400 in the same error shape."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).post(
            "/api/similarity",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_non_string_cluster_id_in_body(self, tmp_path: Path) -> None:
        """A numeric clusterId in a body is treated as missing."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).post("/api/similarity", json={"clusterId": 42})
        assert response.status_code == 400
        assert response.json() == {"error": MISSING_CLUSTER_ID}


@pytest.mark.unit
class TestSimilarityResponses:
    """Outcome to HTTP mapping."""

    def test_defaults_passed_to_resolver(self, tmp_path: Path) -> None:
        """Omitted parameters take the configured defaults."""
        app, resolver = _make_app(tmp_path)
        TestClient(app).get("/api/similarity?clusterId=c1")
        resolver.resolve.assert_awaited_once_with("c1", 0.3, 20, mode="auto")

    def test_reference_id_alias(self, tmp_path: Path) -> None:
        """referenceId is accepted in place of clusterId."""
        app, resolver = _make_app(tmp_path)
        response = TestClient(app).get(
            "/api/similarity?referenceId=c9&threshold=0.5&limit=5&mode=local"
        )
        assert response.status_code == 200
        resolver.resolve.assert_awaited_once_with("c9", 0.5, 5, mode="local")

    def test_success_shape(self, tmp_path: Path) -> None:
        """Success returns success, data and count."""
        outcome = SimilarityOutcome.succeeded(
            [make_similarity_result(id="c2", similarity_score=0.91)], "rank_v2"
        )
        app, _ = _make_app(tmp_path, outcome)
        response = TestClient(app).get("/api/similarity?clusterId=c1")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["data"][0]["id"] == "c2"
        assert body["data"][0]["similarity_score"] == pytest.approx(0.91)
        assert body["data"][0]["grant_name"] == "Rural Broadband Grant"

    def test_post_body(self, tmp_path: Path) -> None:
        """POST accepts the same parameters as JSON types."""
        app, resolver = _make_app(tmp_path)
        response = TestClient(app).post(
            "/api/similarity",
            json={"clusterId": "c1", "threshold": 0.6, "limit": 10},
        )
        assert response.status_code == 200
        resolver.resolve.assert_awaited_once_with("c1", 0.6, 10, mode="auto")

    def test_not_found_is_404(self, tmp_path: Path) -> None:
        """An unknown reference maps to 404."""
        outcome = SimilarityOutcome.failed(NotFoundError("Reference cluster not found"))
        app, _ = _make_app(tmp_path, outcome)
        response = TestClient(app).get("/api/similarity?clusterId=nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Reference cluster not found"}

    @pytest.mark.parametrize(
        "error",
        [
            NoEmbeddingError("Reference cluster has no vector data"),
            DecodeError("Failed to parse vector data"),
            RemoteError("Failed to calculate similarity: timeout"),
        ],
    )
    def test_other_failures_are_500(self, tmp_path: Path, error: Exception) -> None:
        """Every other failure maps to 500 with its message."""
        app, _ = _make_app(tmp_path, SimilarityOutcome.failed(error))  # type: ignore[arg-type]
        response = TestClient(app).get("/api/similarity?clusterId=c1")
        assert response.status_code == 500
        assert response.json() == {"error": str(error)}

    def test_unhandled_exception_is_generic_500(self, tmp_path: Path) -> None:
        """An exception escaping the handler becomes a generic 500."""
        app, resolver = _make_app(tmp_path)
        resolver.resolve.side_effect = RuntimeError("kaboom")
        response = TestClient(app, raise_server_exceptions=False).get(
            "/api/similarity?clusterId=c1"
        )
        assert response.status_code == 500
        assert response.json() == {"error": UNEXPECTED_ERROR_MESSAGE}

    def test_request_id_header(self, tmp_path: Path) -> None:
        """A caller's X-Request-ID is echoed back."""
        app, _ = _make_app(tmp_path)
        response = TestClient(app).get(
            "/api/similarity?clusterId=c1", headers={"X-Request-ID": "req-1"}
        )
        assert response.headers["X-Request-ID"] == "req-1"


@pytest.mark.unit
class TestHealth:
    """Health endpoint."""

    def test_health(self, tmp_path: Path) -> None:
        """Health reports healthy with a timestamp."""
        app, _ = _make_app(tmp_path)
        body = TestClient(app).get("/health").json()
        assert body["status"] == "healthy"
        assert "timestamp" in body
        assert body["database"] == "unknown"

    def test_health_checks_database(self, tmp_path: Path) -> None:
        """With the engine started, the database is reported reachable."""
        app, _ = _make_app(tmp_path)
        with TestClient(app) as client:
            response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "ok"

    def test_health_database_unavailable(self, tmp_path: Path) -> None:
        """An unreachable database degrades health to 503."""
        app, _ = _make_app(tmp_path)
        with (
            patch(
                "grant_monitor_service.api.routers.health.check_database",
                new=AsyncMock(return_value=False),
            ),
            TestClient(app) as client,
        ):
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "unavailable"


async def _seed(tmp_path: Path) -> None:
    """Write reference R and candidates A, B, C into the SQLite file."""
    engine = create_engine(make_real_settings(tmp_path))
    await init_db(engine)
    async with create_session_factory(engine)() as session:
        repo = ClusterRepository(session)
        for cluster_id, vector in [
            ("R", [1.0, 0.0, 0.0]),
            ("A", [1.0, 0.0, 0.0]),
            ("B", [0.0, 1.0, 0.0]),
            ("C", [0.9, 0.1, 0.0]),
        ]:
            await repo.create(make_cluster_model(cluster_id, vector))
        await session.commit()
    await engine.dispose()


@pytest.mark.unit
class TestSqliteApp:
    """The full stack against a SQLite file."""

    def test_similar_clusters(self, tmp_path: Path) -> None:
        """Stored clusters are ranked through the local path."""
        asyncio.run(_seed(tmp_path))
        app = create_app(make_real_settings(tmp_path))

        with TestClient(app) as client:
            response = client.get("/api/similarity?clusterId=R")

        assert response.status_code == 200
        body = response.json()
        assert [r["id"] for r in body["data"]] == ["A", "C"]
        assert body["count"] == 2

    def test_unknown_cluster(self, tmp_path: Path) -> None:
        """An unknown id is a 404 end to end."""
        app = create_app(make_real_settings(tmp_path))
        with TestClient(app) as client:
            response = client.get("/api/similarity?clusterId=missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Reference cluster not found"}
