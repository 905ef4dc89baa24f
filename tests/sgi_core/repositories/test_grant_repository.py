"""Unit tests for GrantRepository."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.repositories.grant_repository import GrantRepository
from sgi_core.runtime.errors import BadRequestError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def persona() -> EntityRef:
    return EntityRef(EntityKind.PERSONA, str(uuid.uuid4()))


class TestCreate:
    def test_inserts_grant(self, mock_db):
        mock_conn, mock_cursor = mock_db
        user_id = str(uuid.uuid4())
        ref = persona()

        grant = GrantRepository(dsn="mock://").create(
            user_id, ref, NOW + timedelta(hours=2), now=NOW
        )

        params = mock_cursor.execute.call_args[0][1]
        assert params[1:4] == (user_id, ref.id, "personas")
        assert grant.expires_at == NOW + timedelta(hours=2)
        assert grant.created_at == grant.updated_at == NOW
        mock_conn.commit.assert_called_once()

    def test_past_expiry_rejected(self, mock_db):
        with pytest.raises(BadRequestError, match="future"):
            GrantRepository(dsn="mock://").create(str(uuid.uuid4()), persona(), NOW, now=NOW)

    def test_naive_expiry_rejected(self, mock_db):
        with pytest.raises(BadRequestError, match="timezone"):
            GrantRepository(dsn="mock://").create(
                str(uuid.uuid4()), persona(), datetime(2030, 1, 1), now=NOW
            )

    def test_non_uuid_user_rejected(self, mock_db):
        with pytest.raises(BadRequestError, match="user_id"):
            GrantRepository(dsn="mock://").create(
                "bob", persona(), NOW + timedelta(hours=1), now=NOW
            )


class TestFindActive:
    def test_query_excludes_expired(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None
        ref = persona()

        result = GrantRepository(dsn="mock://").find_active(str(uuid.uuid4()), ref, NOW)

        query, params = mock_cursor.execute.call_args[0]
        assert result is None
        assert "expires_at > %s" in query
        assert params[2:] == ("personas", NOW)

    def test_maps_row(self, mock_db):
        _, mock_cursor = mock_db
        grant_id, user_id, ref = uuid.uuid4(), uuid.uuid4(), persona()
        mock_cursor.fetchone.return_value = (
            grant_id, user_id, uuid.UUID(ref.id), "personas", NOW + timedelta(hours=1), NOW, NOW
        )

        grant = GrantRepository(dsn="mock://").find_active(str(user_id), ref, NOW)

        assert grant.id == str(grant_id)
        assert grant.matches(str(user_id), ref, NOW)

    def test_non_uuid_ids_skip_database(self, mock_db):
        _, mock_cursor = mock_db

        assert GrantRepository(dsn="mock://").find_active("bob", persona(), NOW) is None
        mock_cursor.execute.assert_not_called()


class TestPurge:
    def test_purge_returns_row_count(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.rowcount = 4

        removed = GrantRepository(dsn="mock://").purge_expired(NOW)

        assert removed == 4
        assert "DELETE FROM temporary_access" in mock_cursor.execute.call_args[0][0]
        mock_conn.commit.assert_called_once()
