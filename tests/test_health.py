"""Health endpoint tests."""

from fastapi.testclient import TestClient

from chatsearch.search.errors import EngineError
from chatsearch.search.params import Params
from fake_engine import FakeEngine


def test_liveness_returns_200(client: TestClient) -> None:
    """Liveness endpoint returns 200 OK."""
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200


def test_liveness_returns_status(client: TestClient) -> None:
    """Liveness endpoint returns alive status."""
    response = client.get("/api/v1/health/live")
    data = response.json()
    assert "status" in data
    assert data["status"] == "alive"


def test_readiness_ok_when_engine_answers(client: TestClient) -> None:
    """Readiness reports ready when the engine answers a probe query."""
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"][0] == {"name": "engine", "status": "ok", "message": None}


def test_readiness_503_when_engine_fails(client: TestClient, engine: FakeEngine) -> None:
    """Readiness reports not_ready when the engine call fails."""

    async def broken(params: Params) -> None:
        raise EngineError("connection refused")

    engine.execute = broken  # type: ignore[method-assign]
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
