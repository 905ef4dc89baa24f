"""HTTP tests for the login flow."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.auth.routes import get_user_service


@pytest.fixture
def user_service(app):
    service = MagicMock()
    service.authenticate.return_value = {
        "user_id": "6f1d3c1e-8a9b-4c1d-9e2f-0a1b2c3d4e5f",
        "correo": "ana@example.com",
        "nombre": "Ana",
        "apellido": "Perez",
        "role": "analyst",
        "area": "CI2",
        "is_active": True,
    }
    service.get_by_id.return_value = service.authenticate.return_value
    app.dependency_overrides[get_user_service] = lambda: service
    return service


@pytest.fixture
def stub_refresh_tokens(jwt_service, monkeypatch):
    monkeypatch.setattr(jwt_service, "create_refresh_token", lambda user_id: "refresh-token")
    monkeypatch.setattr(jwt_service, "revoke_all_for_user", MagicMock(return_value=1))
    return jwt_service


class TestLogin:
    def test_login_returns_tokens_with_role_and_area(
        self, client, user_service, stub_refresh_tokens, jwt_service
    ):
        response = client.post(
            "/auth/login", json={"correo": "ana@example.com", "password": "SecurePass123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["refresh_token"] == "refresh-token"
        assert body["user"]["area"] == "CI2"
        payload = jwt_service.verify_access_token(body["access_token"])
        assert payload["role"] == "analyst"
        assert payload["area"] == "CI2"

    def test_bad_credentials(self, client, user_service, stub_refresh_tokens):
        user_service.authenticate.return_value = None

        response = client.post(
            "/auth/login", json={"correo": "ana@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Correo o contraseña incorrectos"}

    def test_login_is_rate_limited(self, client, user_service, stub_refresh_tokens):
        credentials = {"correo": "ana@example.com", "password": "SecurePass123"}

        for i in range(5):
            response = client.post("/auth/login", json=credentials)
            assert response.status_code == 200, f"Request {i + 1} failed: {response.text}"

        assert client.post("/auth/login", json=credentials).status_code == 429


class TestRefresh:
    def test_refresh_rereads_user(self, client, user_service, jwt_service, monkeypatch):
        monkeypatch.setattr(
            jwt_service, "verify_refresh_token", lambda token: user_service.get_by_id.return_value["user_id"]
        )
        user_service.get_by_id.return_value = {
            **user_service.get_by_id.return_value,
            "area": "SEP",
        }

        response = client.post("/auth/refresh", json={"refresh_token": "refresh-token"})

        assert response.status_code == 200
        assert jwt_service.verify_access_token(response.json()["access_token"])["area"] == "SEP"

    def test_invalid_refresh_token(self, client, user_service, jwt_service, monkeypatch):
        monkeypatch.setattr(jwt_service, "verify_refresh_token", lambda token: None)

        response = client.post("/auth/refresh", json={"refresh_token": "stale"})

        assert response.status_code == 401

    def test_inactive_user_cannot_refresh(self, client, user_service, jwt_service, monkeypatch):
        monkeypatch.setattr(jwt_service, "verify_refresh_token", lambda token: "u-1")
        user_service.get_by_id.return_value = {
            **user_service.get_by_id.return_value,
            "is_active": False,
        }

        assert client.post("/auth/refresh", json={"refresh_token": "x"}).status_code == 401


class TestSession:
    def test_me(self, client, login_as):
        user_id, headers = login_as("superuser", "TIC")

        response = client.get("/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["user_id"] == user_id
        assert response.json()["area"] == "TIC"

    def test_logout_revokes_refresh_tokens(self, client, login_as, stub_refresh_tokens):
        user_id, headers = login_as("user", "TIC")

        response = client.post("/auth/logout", headers=headers)

        assert response.status_code == 200
        stub_refresh_tokens.revoke_all_for_user.assert_called_once_with(user_id)
