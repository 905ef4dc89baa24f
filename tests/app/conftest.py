"""Fixtures for HTTP-level tests: the real app over in-memory stores."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.auth.routes import get_jwt_service, get_user_service
from app.main import create_app
from sgi_core.auth.dependencies import (
    get_area_repository,
    get_entity_repository,
    get_grant_repository,
)
from sgi_core.auth.jwt_service import JwtService
from sgi_core.infrastructure.rate_limiter import limiter
from tests.conftest import TEST_SECRET


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def jwt_service():
    return JwtService(dsn="mock://", secret=TEST_SECRET)


@pytest.fixture
def app(jwt_service, entities, grants, areas, users):
    application = create_app(require_auth=True, jwt_service=jwt_service)
    application.dependency_overrides[get_entity_repository] = lambda: entities
    application.dependency_overrides[get_grant_repository] = lambda: grants
    application.dependency_overrides[get_area_repository] = lambda: areas
    application.dependency_overrides[get_user_service] = lambda: users
    application.dependency_overrides[get_jwt_service] = lambda: jwt_service
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login_as(users, jwt_service):
    """Create a user and return (user_id, auth headers) for it."""

    def _login_as(role: str, area: str) -> tuple[str, dict]:
        user_id = users.add(role=role, area=area)
        token = jwt_service.create_access_token(user_id=user_id, role=role, area=area)
        return user_id, {"Authorization": f"Bearer {token}"}

    return _login_as
