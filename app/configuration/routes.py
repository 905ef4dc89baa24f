"""
Admin configuration routes.

- Temporary access grants: create, list active, purge expired
- Area allow-list: list, add, rename, remove
"""

import uuid
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Body, Depends, Query
from loguru import logger
from pydantic import BaseModel

from app.auth.routes import get_user_service
from sgi_core.auth import get_principal, require_roles
from sgi_core.auth.dependencies import (
    get_area_repository,
    get_entity_repository,
    get_grant_repository,
)
from sgi_core.auth.user_service import UserService
from sgi_core.config import settings
from sgi_core.domain.auth import Principal, Role
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.repositories.area_repository import AreaRepository
from sgi_core.repositories.entity_repository import EntityRepository
from sgi_core.repositories.grant_repository import GrantRepository
from sgi_core.runtime.errors import NotFoundError

router = APIRouter(prefix="/configuracion", tags=["configuracion"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class GrantRequest(BaseModel):
    """Temporary access request. Naive expires_at values are read as UTC."""

    user_id: uuid.UUID
    entity_id: uuid.UUID
    entity_type: str
    expires_at: datetime


class GrantResponse(BaseModel):
    id: str
    user_id: str
    entity_id: str
    entity_type: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime


class AreaRequest(BaseModel):
    area: str


class RenameAreaRequest(BaseModel):
    old_area: str
    new_area: str


class AreaChangeResponse(BaseModel):
    message: str
    version: int


class AreaListResponse(BaseModel):
    areas: list[str]
    version: int


# =============================================================================
# Temporary access
# =============================================================================


@router.post("/acceso-temporal", response_model=GrantResponse, status_code=201)
async def grant_temporary_access(
    body: GrantRequest = Body(...),
    admin: Principal = Depends(require_roles(Role.ADMIN)),
    grants: GrantRepository = Depends(get_grant_repository),
    entities: EntityRepository = Depends(get_entity_repository),
    user_service: UserService = Depends(get_user_service),
):
    """Let a user from another area reach one record until expires_at."""
    kind = EntityKind.from_segment(body.entity_type)
    ref = EntityRef(kind, str(body.entity_id))

    if entities.get_area(ref) is None:
        raise NotFoundError("Entity not found")
    if user_service.get_by_id(str(body.user_id)) is None:
        raise NotFoundError("User not found")

    expires_at = body.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    grant = grants.create(str(body.user_id), ref, expires_at)
    logger.info(f"Admin {admin.user_id} granted {body.user_id} access to {ref}")
    return GrantResponse(**grant.to_dict())


@router.get("/acceso-temporal", response_model=list[GrantResponse])
async def list_temporary_access(
    user_id: uuid.UUID | None = Query(default=None),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    grants: GrantRepository = Depends(get_grant_repository),
):
    """List grants that have not expired yet."""
    active = grants.list_active(
        datetime.now(timezone.utc), user_id=str(user_id) if user_id else None
    )
    return [GrantResponse(**g.to_dict()) for g in active]


@router.delete("/acceso-temporal/expired")
async def purge_expired_access(
    _: Principal = Depends(require_roles(Role.ADMIN)),
    grants: GrantRepository = Depends(get_grant_repository),
):
    """Delete grants expired for longer than GRANT_RETENTION_DAYS."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=settings.GRANT_RETENTION_DAYS)
    removed = grants.purge_expired(cutoff)
    return {"purged": removed, "cutoff": cutoff.isoformat()}


# =============================================================================
# Areas
# =============================================================================


@router.get("/area", response_model=AreaListResponse)
async def list_areas(
    _: Principal = Depends(get_principal),
    areas: AreaRepository = Depends(get_area_repository),
):
    return AreaListResponse(areas=areas.list_areas(), version=areas.version())


@router.post("/area", response_model=AreaChangeResponse)
async def add_area(
    body: AreaRequest = Body(...),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    areas: AreaRepository = Depends(get_area_repository),
):
    version = areas.add(body.area)
    return AreaChangeResponse(message="Área agregada correctamente", version=version)


@router.put("/area", response_model=AreaChangeResponse)
async def rename_area(
    body: RenameAreaRequest = Body(...),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    areas: AreaRepository = Depends(get_area_repository),
):
    version = areas.rename(body.old_area, body.new_area)
    return AreaChangeResponse(message="Área actualizada correctamente", version=version)


@router.delete("/area", response_model=AreaChangeResponse)
async def remove_area(
    body: AreaRequest = Body(...),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    areas: AreaRepository = Depends(get_area_repository),
):
    version = areas.remove(body.area)
    return AreaChangeResponse(message="Área eliminada correctamente", version=version)
