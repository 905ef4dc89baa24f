"""
Unit tests for the FastAPI application.

Verify health, docs, auth enforcement on protected routes and CORS.
"""

import pytest
from fastapi.testclient import TestClient


class TestAppHealth:
    def test_health_endpoint_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_endpoint_includes_service_name(self, client):
        assert "service" in client.get("/health").json()


class TestAppRouterMounting:
    def test_openapi_lists_every_record_kind(self, client):
        paths = client.get("/openapi.json").json()["paths"]

        for segment in ("casos", "documentos", "pasaportes", "personas", "vehiculos",
                        "empresas", "direcciones", "visas", "iios"):
            assert f"/{segment}" in paths
            assert f"/{segment}/{{entity_id}}" in paths

    def test_configuration_routes_mounted(self, client):
        paths = client.get("/openapi.json").json()["paths"]

        assert "/configuracion/acceso-temporal" in paths
        assert "/configuracion/area" in paths

    def test_unknown_kind_is_404(self, client, login_as):
        _, headers = login_as("admin", "SEP")

        assert client.get("/usuarios", headers=headers).status_code == 404


class TestAppAuth:
    def test_protected_route_requires_token(self, client):
        response = client.get("/casos")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_docs_are_public(self, client):
        assert client.get("/docs").status_code == 200


class TestAppCORS:
    def test_cors_allows_configured_origin(self, client):
        from sgi_core.config import settings

        origin = settings.CORS_ORIGINS[0]
        response = client.options(
            "/health",
            headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
        )

        assert response.headers.get("access-control-allow-origin") == origin


@pytest.fixture
def default_client():
    """The module-level app as uvicorn would serve it."""
    from app.main import app

    return TestClient(app)


def test_module_level_app_serves_health(default_client):
    assert default_client.get("/health").status_code == 200
