"""
Access control for area-scoped records.

Provides the access decision engine, the role gate, and the store
protocols they read from.
"""

from sgi_core.access.engine import AccessDecisionEngine
from sgi_core.access.protocols import EntityAreaLookup, GrantStore
from sgi_core.access.role_gate import check_role, role_allowed

__all__ = [
    "AccessDecisionEngine",
    "EntityAreaLookup",
    "GrantStore",
    "check_role",
    "role_allowed",
]
