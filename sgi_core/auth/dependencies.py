"""
FastAPI dependencies for authorization.

Provides dependency injection for:
- Extracting auth context and principal from requests
- Store factories shared by routes and the access engine
- Role gates for collection routes
- Area/grant/role checks for routes that target one record
"""

from __future__ import annotations

from fastapi import Depends, Request

from sgi_core.access.engine import AccessDecisionEngine
from sgi_core.access.role_gate import check_role
from sgi_core.domain.auth import AuthContext, AuthorizationContext, Principal, Role
from sgi_core.domain.entities import EntityKind
from sgi_core.repositories.area_repository import AreaRepository
from sgi_core.repositories.entity_repository import EntityRepository
from sgi_core.repositories.grant_repository import GrantRepository
from sgi_core.runtime.errors import UnauthorizedError


def get_auth_context(request: Request) -> AuthContext:
    """Get auth context from request state.

    Raises:
        UnauthorizedError: 401 if not authenticated.
    """
    auth = getattr(request.state, "auth", None)
    if not auth:
        raise UnauthorizedError("Not authenticated")
    return auth


def get_principal(auth: AuthContext = Depends(get_auth_context)) -> Principal:
    """Get the authenticated principal.

    The principal's area is derived from the token, never from client input.
    """
    return auth.principal


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


# =============================================================================
# Store Factories
# =============================================================================


def get_entity_repository() -> EntityRepository:
    """Get entity repository instance."""
    return EntityRepository()


def get_grant_repository() -> GrantRepository:
    """Get temporary grant repository instance."""
    return GrantRepository()


def get_area_repository() -> AreaRepository:
    """Get area allow-list repository instance."""
    return AreaRepository()


def get_access_engine(
    entities: EntityRepository = Depends(get_entity_repository),
    grants: GrantRepository = Depends(get_grant_repository),
) -> AccessDecisionEngine:
    """Build the access engine over the configured stores."""
    return AccessDecisionEngine(entity_lookup=entities, grant_store=grants)


# =============================================================================
# Gates
# =============================================================================


def require_roles(*roles: str | Role):
    """Dependency factory for the role gate alone.

    Usage:
        @router.get("/users")
        async def list_users(principal: Principal = Depends(require_roles(Role.ADMIN))):
            ...
    """

    def _check_roles(
        principal: Principal = Depends(get_principal),
        request_id: str = Depends(get_request_id),
    ) -> Principal:
        return check_role(principal, roles, request_id=request_id)

    return _check_roles


def authorize_collection(kind: EntityKind, *roles: str | Role):
    """Dependency factory for create/list routes of one record kind.

    The returned context carries no entity area; the record store scopes
    the operation by the principal's area instead.
    """

    def _authorize(
        principal: Principal = Depends(get_principal),
        engine: AccessDecisionEngine = Depends(get_access_engine),
        request_id: str = Depends(get_request_id),
    ) -> AuthorizationContext:
        context = engine.decide(principal, kind, None, request_id=request_id)
        check_role(principal, roles, context, request_id=request_id)
        return context

    return _authorize


def authorize_item(kind: EntityKind, *roles: str | Role):
    """Dependency factory for routes addressing /{kind}/{entity_id}.

    Runs the access engine first (404 before anything else, then admin,
    grant and area rules) and hands its context to the role gate, so a
    role denial can name the record's area and kind.
    """

    def _authorize(
        entity_id: str,
        principal: Principal = Depends(get_principal),
        engine: AccessDecisionEngine = Depends(get_access_engine),
        request_id: str = Depends(get_request_id),
    ) -> AuthorizationContext:
        context = engine.decide(principal, kind, entity_id, request_id=request_id)
        check_role(principal, roles, context, request_id=request_id)
        return context

    return _authorize
