"""
AreaRepository: the versioned area allow-list.

Areas live in the `areas` table. Every mutation runs in one transaction
that first locks the single `area_config` row (SELECT ... FOR UPDATE),
so concurrent admin edits serialize and each successful edit bumps the
config version by exactly one. Renames cascade to users and records so
nothing is left stamped with a name that no longer exists.
"""

from __future__ import annotations

from loguru import logger

from sgi_core.domain.entities import EntityKind
from sgi_core.infrastructure.postgres import get_db_connection
from sgi_core.runtime.errors import BadRequestError, ConflictError, NotFoundError


class AreaRepository:
    """Repository for the area allow-list."""

    def __init__(self, dsn: str | None = None):
        self.dsn = dsn

    def list_areas(self) -> list[str]:
        """Return all area names, sorted."""
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM areas ORDER BY name")
            rows = cursor.fetchall()
        return [row[0] for row in rows]

    def version(self) -> int:
        """Current configuration version."""
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT version FROM area_config WHERE id = 1")
            row = cursor.fetchone()
        return row[0] if row else 0

    def is_valid(self, area: str) -> bool:
        """True if area is in the allow-list (exact match)."""
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM areas WHERE name = %s", (area,))
            return cursor.fetchone() is not None

    def add(self, area: str) -> int:
        """
        Add an area.

        Returns:
            The new configuration version.

        Raises:
            BadRequestError: If the name is blank or the area exists (case-insensitive).
        """
        area = self._normalize(area)
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            self._lock(cursor)
            if self._find(cursor, area) is not None:
                raise BadRequestError("El área ya existe")
            cursor.execute("INSERT INTO areas (name) VALUES (%s)", (area,))
            version = self._bump(cursor)
            conn.commit()

        logger.info(f"Area {area!r} added (config version {version})")
        return version

    def rename(self, old_area: str, new_area: str) -> int:
        """
        Rename an area and restamp users and records carrying the old name.

        Returns:
            The new configuration version.

        Raises:
            NotFoundError: If old_area does not exist.
            BadRequestError: If new_area is blank or already exists.
        """
        new_area = self._normalize(new_area)
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            self._lock(cursor)
            current = self._find(cursor, old_area)
            if current is None:
                raise NotFoundError("El área no existe")
            existing = self._find(cursor, new_area)
            if existing is not None and existing != current:
                raise BadRequestError("El área ya existe")

            cursor.execute("UPDATE areas SET name = %s WHERE name = %s", (new_area, current))
            cursor.execute("UPDATE users SET area = %s WHERE area = %s", (new_area, current))
            for kind in EntityKind:
                cursor.execute(
                    f"UPDATE {kind.table} SET area = %s WHERE area = %s",
                    (new_area, current),
                )
            version = self._bump(cursor)
            conn.commit()

        logger.info(f"Area {current!r} renamed to {new_area!r} (config version {version})")
        return version

    def remove(self, area: str) -> int:
        """
        Remove an area.

        Returns:
            The new configuration version.

        Raises:
            NotFoundError: If the area does not exist.
            ConflictError: If active users are still assigned to it.
        """
        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            self._lock(cursor)
            current = self._find(cursor, area)
            if current is None:
                raise NotFoundError("El área no existe")
            cursor.execute(
                "SELECT COUNT(*) FROM users WHERE area = %s AND is_active", (current,)
            )
            if cursor.fetchone()[0] > 0:
                raise ConflictError("El área tiene usuarios asignados")
            cursor.execute("DELETE FROM areas WHERE name = %s", (current,))
            version = self._bump(cursor)
            conn.commit()

        logger.info(f"Area {current!r} removed (config version {version})")
        return version

    def _normalize(self, area: str) -> str:
        area = (area or "").strip()
        if not area:
            raise BadRequestError("Area name is required")
        return area

    def _lock(self, cursor) -> None:
        cursor.execute("SELECT version FROM area_config WHERE id = 1 FOR UPDATE")

    def _find(self, cursor, area: str) -> str | None:
        """Stored spelling of area, matched case-insensitively."""
        cursor.execute("SELECT name FROM areas WHERE LOWER(name) = LOWER(%s)", (area,))
        row = cursor.fetchone()
        return row[0] if row else None

    def _bump(self, cursor) -> int:
        cursor.execute(
            "UPDATE area_config SET version = version + 1, updated_at = NOW() "
            "WHERE id = 1 RETURNING version"
        )
        return cursor.fetchone()[0]
