"""
Temporary access grants.

A grant lets one user bypass the area check for one record until it
expires. Grants are never updated; they become inert once the clock passes
expires_at and are removed only by an explicit purge.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sgi_core.domain.entities import EntityRef


class GrantState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TemporaryGrant:
    """Row of the temporary_access table."""

    id: str
    user_id: str
    entity_id: str
    entity_type: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime

    def state_at(self, now: datetime) -> GrantState:
        return GrantState.ACTIVE if now < self.expires_at else GrantState.EXPIRED

    def matches(self, user_id: str, ref: EntityRef, now: datetime) -> bool:
        """True if this grant lets user_id reach ref at time now."""
        return (
            self.state_at(now) is GrantState.ACTIVE
            and str(self.user_id) == str(user_id)
            and str(self.entity_id) == str(ref.id)
            and self.entity_type == ref.kind.value
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "entity_id": str(self.entity_id),
            "entity_type": self.entity_type,
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
