"""
Protocols for the stores the access layer reads from.

The engine only needs two reads: the area of one record and the active
grant for one (user, record) pair. Any implementation (PostgreSQL
repositories in production, in-memory fakes in tests) satisfying these
protocols can be plugged in.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from sgi_core.domain.entities import EntityRef
from sgi_core.domain.grants import TemporaryGrant


@runtime_checkable
class EntityAreaLookup(Protocol):
    """Resolves the stored area of a single record."""

    def get_area(self, ref: EntityRef) -> str | None:
        """
        Fetch the area of the referenced record.

        Args:
            ref: Kind and id of the record.

        Returns:
            The stored area, or None if the record does not exist.
        """
        ...


@runtime_checkable
class GrantStore(Protocol):
    """Reads temporary access grants."""

    def find_active(
        self, user_id: str, ref: EntityRef, now: datetime
    ) -> TemporaryGrant | None:
        """
        Find a grant for user_id on ref whose expires_at is after now.

        Returns:
            The matching grant, or None.
        """
        ...
