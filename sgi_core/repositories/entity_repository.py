"""
EntityRepository: CRUD operations for area-scoped records.

All nine record kinds share one table layout: a UUID id, the owning
area, the creating user and a JSONB document with the kind-specific
fields. The area is always taken from the creating principal, never
from client input.
"""

from __future__ import annotations

import json
import re
import uuid
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from sgi_core.domain.auth import Principal
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.infrastructure.postgres import get_db_connection
from sgi_core.runtime.errors import BadRequestError

# Keys owned by the store; stripped from client payloads
SYSTEM_FIELDS = frozenset({"id", "area", "user_id", "created_at", "updated_at"})

DEFAULT_PAGE_SIZE = 100

FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def clean_payload(data: dict[str, Any]) -> dict[str, Any]:
    """Drop store-owned keys from a client payload."""
    return {k: v for k, v in data.items() if k not in SYSTEM_FIELDS}


class EntityRepository:
    """Repository for protected records in PostgreSQL.

    Table names interpolated into queries come from EntityKind, never
    from request input.
    """

    def __init__(self, dsn: str | None = None):
        """Initialize the repository.

        Args:
            dsn: PostgreSQL connection string. Defaults to settings.POSTGRES_DSN.
        """
        self.dsn = dsn

    def get_area(self, ref: EntityRef) -> str | None:
        """Return the stored area of a record, or None if it does not exist."""
        entity_id = ref.parsed_id()
        if entity_id is None:
            return None

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT area FROM {ref.kind.table} WHERE id = %s",
                (entity_id,),
            )
            row = cursor.fetchone()

        return row[0] if row else None

    def create(
        self,
        kind: EntityKind,
        data: dict[str, Any],
        principal: Principal,
    ) -> dict[str, Any]:
        """
        Create a record stamped with the principal's area.

        Args:
            kind: Record kind.
            data: Client payload; store-owned keys are ignored.
            principal: Creating user; supplies area and user_id.

        Returns:
            The stored record.
        """
        entity_id = uuid.uuid4()
        now = datetime.now(timezone.utc)
        payload = clean_payload(data)

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO {kind.table} (id, area, user_id, data, created_at, updated_at)
                VALUES (%s, %s, %s, %s::jsonb, %s, %s)
                """,
                (
                    entity_id,
                    principal.area,
                    principal.user_id,
                    json.dumps(payload),
                    now,
                    now,
                ),
            )
            conn.commit()

        logger.info(
            f"Created {kind.display_name} {entity_id} area={principal.area} "
            f"by user={principal.user_id}"
        )
        return {
            "id": str(entity_id),
            "area": principal.area,
            "user_id": str(principal.user_id),
            "data": payload,
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
        }

    def get(self, ref: EntityRef) -> dict[str, Any] | None:
        """Get a record by kind and id."""
        entity_id = ref.parsed_id()
        if entity_id is None:
            return None

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT id, area, user_id, data, created_at, updated_at
                FROM {ref.kind.table}
                WHERE id = %s
                """,
                (entity_id,),
            )
            row = cursor.fetchone()

        return self._row_to_dict(row)

    def list_records(
        self,
        kind: EntityKind,
        area: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        filters: dict[str, str] | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List records of a kind, newest first.

        Args:
            kind: Record kind.
            area: Restrict to this area. None lists every area.
            limit: Page size.
            offset: Rows to skip.
            filters: Exact matches on top-level document fields,
                e.g. {"cedula": "V-123"} or {"matricula": "AB123CD"}.
            search: Case-insensitive substring matched anywhere in the document.

        Raises:
            BadRequestError: If a filter names an invalid field.
        """
        query = f"SELECT id, area, user_id, data, created_at, updated_at FROM {kind.table}"
        conditions: list[str] = []
        params: list[Any] = []
        if area is not None:
            conditions.append("area = %s")
            params.append(area)
        for field, value in (filters or {}).items():
            if not FIELD_NAME.match(field):
                raise BadRequestError(f"Invalid filter field: {field}")
            conditions.append("data ->> %s = %s")
            params.extend([field, value])
        if search:
            conditions.append("data::text ILIKE %s")
            params.append(f"%{search}%")
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY created_at DESC LIMIT %s OFFSET %s"
        params.extend([limit, offset])

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(query, tuple(params))
            rows = cursor.fetchall()

        return [self._row_to_dict(row) for row in rows]

    def count_by_area(
        self,
        start: datetime,
        end: datetime,
        area: str | None = None,
    ) -> dict[str, dict[str, int]]:
        """
        Count records created in [start, end) per area and kind.

        Returns:
            {area: {kind segment: count}}; kinds with no records are 0.
        """
        counts: dict[str, dict[str, int]] = {}
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            for kind in EntityKind:
                query = (
                    f"SELECT area, COUNT(*) FROM {kind.table} "
                    "WHERE created_at >= %s AND created_at < %s"
                )
                params: list[Any] = [start, end]
                if area is not None:
                    query += " AND area = %s"
                    params.append(area)
                cursor.execute(query + " GROUP BY area", tuple(params))
                for row_area, count in cursor.fetchall():
                    per_kind = counts.setdefault(row_area, {k.value: 0 for k in EntityKind})
                    per_kind[kind.value] = count

        return counts

    def update(self, ref: EntityRef, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Merge data into a record's document. The area cannot be changed.

        Returns:
            The updated record, or None if it does not exist.
        """
        entity_id = ref.parsed_id()
        if entity_id is None:
            return None

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                UPDATE {ref.kind.table}
                SET data = data || %s::jsonb, updated_at = %s
                WHERE id = %s
                RETURNING id, area, user_id, data, created_at, updated_at
                """,
                (json.dumps(clean_payload(data)), datetime.now(timezone.utc), entity_id),
            )
            row = cursor.fetchone()
            conn.commit()

        if row:
            logger.info(f"Updated {ref}")
        return self._row_to_dict(row)

    def delete(self, ref: EntityRef) -> bool:
        """Delete a record. Returns False if it did not exist."""
        entity_id = ref.parsed_id()
        if entity_id is None:
            return False

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM {ref.kind.table} WHERE id = %s", (entity_id,))
            deleted = cursor.rowcount > 0
            conn.commit()

        if deleted:
            logger.info(f"Deleted {ref}")
        return deleted

    def _row_to_dict(self, row: tuple | None) -> dict[str, Any] | None:
        """Convert database row to dictionary."""
        if not row:
            return None

        data = row[3]
        if isinstance(data, str):
            data = json.loads(data)

        return {
            "id": str(row[0]),
            "area": row[1],
            "user_id": str(row[2]) if row[2] else None,
            "data": data or {},
            "created_at": row[4].isoformat() if row[4] else None,
            "updated_at": row[5].isoformat() if row[5] else None,
        }
