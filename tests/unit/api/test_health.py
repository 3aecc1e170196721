"""
Tests for the Health Router and application root.
"""

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from toolplan import __version__
from toolplan.api.routes.health import router as health_router
from toolplan.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealthRouter:
    """GET /health liveness endpoint."""

    def test_health_endpoint_returns_200(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_endpoint_returns_expected_schema(self, client: TestClient):
        data = client.get("/health").json()
        assert data == {"status": "healthy", "version": __version__}

    def test_health_router_is_fastapi_router(self):
        assert isinstance(health_router, APIRouter)


class TestRootEndpoint:
    def test_root_describes_service(self, client: TestClient):
        data = client.get("/").json()
        assert data["service"] == "Tool Plan Engine"
        assert data["version"] == "1.0.0"


class TestLifespan:
    def test_startup_and_shutdown(self):
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert app.state.environment == "development"
