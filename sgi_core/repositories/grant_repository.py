"""
GrantRepository: storage for temporary access grants.

Grants are inserted once and never updated. Expired rows stay inert
until purge_expired() removes them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from loguru import logger

from sgi_core.domain.entities import EntityRef
from sgi_core.domain.grants import TemporaryGrant
from sgi_core.infrastructure.postgres import get_db_connection
from sgi_core.runtime.errors import BadRequestError

_COLUMNS = "id, user_id, entity_id, entity_type, expires_at, created_at, updated_at"


class GrantRepository:
    """Repository for the temporary_access table."""

    def __init__(self, dsn: str | None = None):
        self.dsn = dsn

    def create(
        self,
        user_id: str,
        ref: EntityRef,
        expires_at: datetime,
        now: datetime | None = None,
    ) -> TemporaryGrant:
        """
        Insert a grant letting user_id reach ref until expires_at.

        Args:
            user_id: Grantee.
            ref: Target record.
            expires_at: Timezone-aware expiry; must be in the future.
            now: Creation time. Defaults to the current UTC time.

        Raises:
            BadRequestError: If expires_at is naive or not in the future,
                or if either id is not a UUID.
        """
        now = now or datetime.now(timezone.utc)
        if expires_at.tzinfo is None:
            raise BadRequestError("expires_at must include a timezone")
        if expires_at <= now:
            raise BadRequestError("expires_at must be in the future")

        entity_id = ref.parsed_id()
        if entity_id is None:
            raise BadRequestError("entity_id must be a UUID")
        try:
            grantee = uuid.UUID(str(user_id))
        except ValueError:
            raise BadRequestError("user_id must be a UUID") from None

        grant = TemporaryGrant(
            id=str(uuid.uuid4()),
            user_id=str(grantee),
            entity_id=str(entity_id),
            entity_type=ref.kind.value,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO temporary_access ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    grant.id,
                    grant.user_id,
                    grant.entity_id,
                    grant.entity_type,
                    grant.expires_at,
                    grant.created_at,
                    grant.updated_at,
                ),
            )
            conn.commit()

        logger.info(
            f"Granted user={grant.user_id} temporary access to {ref} "
            f"until {expires_at.isoformat()}"
        )
        return grant

    def find_active(
        self, user_id: str, ref: EntityRef, now: datetime
    ) -> TemporaryGrant | None:
        """Find a grant for (user_id, ref) that expires after now."""
        entity_id = ref.parsed_id()
        if entity_id is None:
            return None
        try:
            grantee = uuid.UUID(str(user_id))
        except ValueError:
            return None

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_COLUMNS}
                FROM temporary_access
                WHERE user_id = %s AND entity_id = %s AND entity_type = %s
                  AND expires_at > %s
                LIMIT 1
                """,
                (grantee, entity_id, ref.kind.value, now),
            )
            row = cursor.fetchone()

        return self._row_to_grant(row)

    def list_active(
        self, now: datetime, user_id: str | None = None
    ) -> list[TemporaryGrant]:
        """List unexpired grants, optionally for one user, soonest expiry first."""
        query = f"SELECT {_COLUMNS} FROM temporary_access WHERE expires_at > %s"
        params: list = [now]
        if user_id is not None:
            query += " AND user_id = %s"
            params.append(user_id)
        query += " ORDER BY expires_at ASC"

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(query, tuple(params))
            rows = cursor.fetchall()

        return [self._row_to_grant(row) for row in rows]

    def purge_expired(self, before: datetime) -> int:
        """
        Delete grants that expired before the given instant.

        Returns:
            Number of rows removed.
        """
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM temporary_access WHERE expires_at <= %s",
                (before,),
            )
            removed = cursor.rowcount
            conn.commit()

        logger.info(f"Purged {removed} temporary access grants expired before {before.isoformat()}")
        return removed

    def _row_to_grant(self, row: tuple | None) -> TemporaryGrant | None:
        if not row:
            return None
        return TemporaryGrant(
            id=str(row[0]),
            user_id=str(row[1]),
            entity_id=str(row[2]),
            entity_type=row[3],
            expires_at=row[4],
            created_at=row[5],
            updated_at=row[6],
        )
