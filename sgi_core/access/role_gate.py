"""
Role Gate.

Each route declares the roles it accepts. Matching is case-insensitive.
When the access engine has already resolved the target record, its
AuthorizationContext is passed in so the denial can name the record's
area and kind.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from sgi_core.domain.auth import AuthorizationContext, Principal, Role
from sgi_core.infrastructure.telemetry import record_access_decision
from sgi_core.runtime.errors import ForbiddenError, UnauthorizedError

DEFAULT_DENIAL = "You don't have permission to access this resource"


def role_allowed(role: str, allowed_roles: Iterable[str | Role]) -> bool:
    """Case-insensitive membership test."""
    wanted = role.casefold()
    return any(
        (r.value if isinstance(r, Role) else r).casefold() == wanted for r in allowed_roles
    )


def check_role(
    principal: Principal | None,
    allowed_roles: Iterable[str | Role],
    context: AuthorizationContext | None = None,
    request_id: str = "-",
) -> Principal:
    """Reject principals whose role is not whitelisted.

    Args:
        principal: The authenticated caller.
        allowed_roles: Roles accepted by the route.
        context: Optional result of a prior access decision.
        request_id: Correlation id for log lines.

    Returns:
        The principal, unchanged.

    Raises:
        UnauthorizedError: If principal is None.
        ForbiddenError: If the role is not in allowed_roles.
    """
    if principal is None:
        raise UnauthorizedError("User ID not found in context")

    if role_allowed(principal.role, allowed_roles):
        return principal

    entity_type = context.entity_type.value if context else "-"
    record_access_decision("role_denied", entity_type)
    target = f"{entity_type}#{context.entity_id}" if context and context.entity_id else entity_type
    logger.warning(
        f"[{request_id}] Role denied: user={principal.user_id} role={principal.role!r} "
        f"target={target}"
    )

    if context is not None and context.has_entity:
        raise ForbiddenError(
            f"{DEFAULT_DENIAL} in area: {context.entity_area}, entity: {context.entity_name}",
            entity_area=context.entity_area,
            entity_name=context.entity_name,
        )
    raise ForbiddenError(DEFAULT_DENIAL)
