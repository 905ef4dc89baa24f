"""
Authentication and authorization domain models.

This module defines the core data structures for auth:
- Role: Known user roles
- Principal: Authenticated identity (from a verified access token)
- AuthContext: Request-scoped authentication context
- AuthorizationContext: Outcome of the area check, handed to later gates
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sgi_core.domain.entities import EntityKind


class Role(str, Enum):
    """User roles. Stored in lowercase; comparisons are case-insensitive."""

    ADMIN = "admin"
    SUPERUSER = "superuser"
    ANALYST = "analyst"
    USER = "user"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity derived from an access token."""

    user_id: str
    role: str
    area: str

    @property
    def is_admin(self) -> bool:
        return self.role.casefold() == Role.ADMIN.value


@dataclass
class AuthContext:
    """Request-scoped authentication context.

    Attached to request.state.auth by the auth middleware.
    """

    principal: Principal
    authenticated_at: datetime
    request_id: str

    @property
    def user_id(self) -> str:
        return self.principal.user_id


class AccessBasis(str, Enum):
    """Which rule let a principal through the area check."""

    ADMIN = "admin"
    TEMPORARY_GRANT = "temporary_grant"
    AREA_MATCH = "area_match"
    COLLECTION = "collection"


@dataclass(frozen=True)
class AuthorizationContext:
    """Result of a successful access decision.

    Passed explicitly to the role gate and the route handler, so a later
    check can describe the entity without consulting shared request state.
    entity_id and entity_area are None for collection routes (create/list).
    """

    principal: Principal
    entity_type: EntityKind
    entity_id: str | None = None
    entity_area: str | None = None
    basis: AccessBasis = AccessBasis.COLLECTION

    @property
    def entity_name(self) -> str:
        return self.entity_type.display_name

    @property
    def has_entity(self) -> bool:
        return self.entity_id is not None and self.entity_area is not None
