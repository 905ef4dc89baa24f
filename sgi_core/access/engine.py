"""
Access Decision Engine.

Decides whether a principal may act on one area-scoped record. Rules are
evaluated in a fixed order and each one short-circuits:

1. The record must exist (404), even for admins.
2. Admins pass.
3. An active temporary grant for (user, record) passes.
4. A matching home area passes.
5. Otherwise 403, disclosing the record's area and kind.

The engine never writes. Its only I/O is one area read and at most one
grant read per decision.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from sgi_core.access.protocols import EntityAreaLookup, GrantStore
from sgi_core.domain.auth import AccessBasis, AuthorizationContext, Principal
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.infrastructure.telemetry import record_access_decision
from sgi_core.runtime.errors import ForbiddenError, NotFoundError, UnauthorizedError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessDecisionEngine:
    """Area/role/grant access check for protected records."""

    def __init__(
        self,
        entity_lookup: EntityAreaLookup,
        grant_store: GrantStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the engine.

        Args:
            entity_lookup: Source of record areas.
            grant_store: Source of temporary access grants.
            clock: Returns the current time; injectable for tests.
        """
        self.entity_lookup = entity_lookup
        self.grant_store = grant_store
        self.clock = clock

    def decide(
        self,
        principal: Principal | None,
        entity_type: EntityKind,
        entity_id: str | None = None,
        now: datetime | None = None,
        request_id: str = "-",
    ) -> AuthorizationContext:
        """Decide whether principal may proceed.

        Args:
            principal: The authenticated caller. None is a contract violation.
            entity_type: Kind of record targeted by the route.
            entity_id: Record id, or None for collection routes (create/list).
            now: Decision time. Defaults to the engine clock.
            request_id: Correlation id for log lines.

        Returns:
            AuthorizationContext describing the target and why access was allowed.

        Raises:
            UnauthorizedError: If principal is None.
            NotFoundError: If entity_id names no record.
            ForbiddenError: If no rule allows access.
        """
        if principal is None:
            raise UnauthorizedError("User ID not found in context")

        if entity_id is None:
            # Area scoping for create/list is applied by the record store
            return AuthorizationContext(principal=principal, entity_type=entity_type)

        ref = EntityRef(kind=entity_type, id=entity_id)
        entity_area = self.entity_lookup.get_area(ref)
        if entity_area is None:
            record_access_decision("not_found", entity_type.value)
            logger.info(f"[{request_id}] {ref} not found for user={principal.user_id}")
            raise NotFoundError("Entity not found")

        def allowed(basis: AccessBasis) -> AuthorizationContext:
            record_access_decision("allow", entity_type.value)
            logger.debug(
                f"[{request_id}] Access to {ref} allowed for user={principal.user_id} "
                f"via {basis.value}"
            )
            return AuthorizationContext(
                principal=principal,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_area=entity_area,
                basis=basis,
            )

        if principal.is_admin:
            return allowed(AccessBasis.ADMIN)

        moment = now or self.clock()
        if self.grant_store.find_active(principal.user_id, ref, moment) is not None:
            return allowed(AccessBasis.TEMPORARY_GRANT)

        if principal.area == entity_area:
            return allowed(AccessBasis.AREA_MATCH)

        record_access_decision("forbidden", entity_type.value)
        logger.warning(
            f"[{request_id}] Access to {ref} denied: user={principal.user_id} "
            f"area={principal.area!r} entity_area={entity_area!r}"
        )
        raise ForbiddenError(
            "You do not have access to this resource",
            entity_area=entity_area,
            entity_name=entity_type.display_name,
        )
