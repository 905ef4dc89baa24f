"""Shared fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from tests.fakes import (
    FakeAreaRepository,
    FakeEntityRepository,
    FakeGrantRepository,
    FakeUserService,
)

TEST_SECRET = "test-secret-key-256-bits-long-ok"


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def entities():
    return FakeEntityRepository()


@pytest.fixture
def grants():
    return FakeGrantRepository()


@pytest.fixture
def areas():
    return FakeAreaRepository()


@pytest.fixture
def users():
    return FakeUserService()


@pytest.fixture
def mock_db():
    """Patch psycopg.connect; yields (connection, cursor) mocks.

    Works for both `conn.cursor()` and `with conn.cursor() as cur`.
    """
    with patch("psycopg.connect") as mock_connect:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_connect.return_value.__enter__.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.__enter__.return_value = mock_cursor
        yield mock_conn, mock_cursor
