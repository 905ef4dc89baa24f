"""Domain models for the SGI records service."""

from sgi_core.domain.auth import (
    AccessBasis,
    AuthContext,
    AuthorizationContext,
    Principal,
    Role,
)
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.domain.grants import GrantState, TemporaryGrant

__all__ = [
    "AccessBasis",
    "AuthContext",
    "AuthorizationContext",
    "EntityKind",
    "EntityRef",
    "GrantState",
    "Principal",
    "Role",
    "TemporaryGrant",
]
