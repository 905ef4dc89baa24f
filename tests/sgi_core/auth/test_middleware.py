"""Unit tests for AuthMiddleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from sgi_core.auth.jwt_service import JwtService
from sgi_core.auth.middleware import DEV_USER_ID, AuthMiddleware

SECRET = "test-secret-key-256-bits-long-ok"


@pytest.fixture
def jwt_service():
    return JwtService(dsn="mock://", secret=SECRET)


def build_app(jwt_service, require_auth=True) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        AuthMiddleware, require_auth=require_auth, jwt_service=jwt_service, dev_area="SEP"
    )

    @app.get("/whoami")
    def whoami(request: Request):
        principal = request.state.auth.principal
        return {"user_id": principal.user_id, "role": principal.role, "area": principal.area}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


class TestAuthMiddleware:
    def test_public_path_needs_no_token(self, jwt_service):
        client = TestClient(build_app(jwt_service))

        assert client.get("/health").status_code == 200

    def test_missing_token_is_401(self, jwt_service):
        client = TestClient(build_app(jwt_service))

        response = client.get("/whoami")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_invalid_token_is_401(self, jwt_service):
        client = TestClient(build_app(jwt_service))

        response = client.get("/whoami", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_valid_token_attaches_principal(self, jwt_service):
        client = TestClient(build_app(jwt_service))
        token = jwt_service.create_access_token(user_id="u-1", role="analyst", area="CI2")

        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "u-1", "role": "analyst", "area": "CI2"}

    def test_dev_mode_injects_admin(self, jwt_service):
        client = TestClient(build_app(jwt_service, require_auth=False))

        response = client.get("/whoami")

        assert response.json() == {"user_id": DEV_USER_ID, "role": "admin", "area": "SEP"}
