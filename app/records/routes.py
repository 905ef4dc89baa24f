"""
CRUD routes for the area-scoped record kinds.

One router is built per EntityKind, so each route knows its kind
statically and the access checks never parse the URL:

- POST   /{kind}          admin, superuser, user     area stamped from caller
- GET    /{kind}          admin, superuser, analyst  filtered to caller's area
- GET    /{kind}/{id}     admin, superuser, analyst  access engine
- PUT    /{kind}/{id}     admin, superuser           access engine
- DELETE /{kind}/{id}     admin                      access engine

Casos also take an assessment from each reviewing role:

- PUT    /casos/valorar/{id}  admin, superuser, analyst  access engine
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from app.records.schemas import AssessmentRequest, RecordList, RecordResponse
from sgi_core.auth.dependencies import (
    authorize_collection,
    authorize_item,
    get_entity_repository,
)
from sgi_core.domain.auth import AuthorizationContext, Role
from sgi_core.domain.entities import EntityKind, EntityRef
from sgi_core.repositories.entity_repository import DEFAULT_PAGE_SIZE, EntityRepository
from sgi_core.runtime.errors import NotFoundError

CREATE_ROLES = (Role.ADMIN, Role.SUPERUSER, Role.USER)
READ_ROLES = (Role.ADMIN, Role.SUPERUSER, Role.ANALYST)
UPDATE_ROLES = (Role.ADMIN, Role.SUPERUSER)
DELETE_ROLES = (Role.ADMIN,)
ASSESS_ROLES = (Role.ADMIN, Role.SUPERUSER, Role.ANALYST)

# Query parameters of the list route that are not document filters
LIST_PARAMS = frozenset({"limit", "offset", "q"})

# Document field holding each role's assessment of a caso
ASSESSMENT_FIELDS = {
    Role.ADMIN.value: "vdirector",
    Role.SUPERUSER.value: "vcoordinador",
    Role.ANALYST.value: "vanalista",
}


def build_records_router(kind: EntityKind) -> APIRouter:
    """Build the CRUD router for one record kind."""
    router = APIRouter(prefix=f"/{kind.value}", tags=[kind.display_name])

    @router.post("", response_model=RecordResponse, status_code=201)
    async def create_record(
        payload: dict[str, Any] = Body(...),
        context: AuthorizationContext = Depends(authorize_collection(kind, *CREATE_ROLES)),
        entities: EntityRepository = Depends(get_entity_repository),
    ):
        """Create a record in the caller's area. A client-supplied area is ignored."""
        return entities.create(kind, payload, context.principal)

    @router.get("", response_model=RecordList)
    async def list_records(
        request: Request,
        limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=500),
        offset: int = Query(default=0, ge=0),
        q: str | None = Query(default=None, description="Text matched anywhere in the record"),
        context: AuthorizationContext = Depends(authorize_collection(kind, *READ_ROLES)),
        entities: EntityRepository = Depends(get_entity_repository),
    ):
        """List records visible to the caller. Admins see every area.

        Any other query parameter is an exact match on a document field,
        e.g. `/personas?cedula=V-123` or `/vehiculos?matricula=AB123CD`.
        """
        principal = context.principal
        area = None if principal.is_admin else principal.area
        filters = {k: v for k, v in request.query_params.items() if k not in LIST_PARAMS}
        items = entities.list_records(
            kind, area=area, limit=limit, offset=offset, filters=filters, search=q
        )
        return RecordList(items=items, count=len(items), limit=limit, offset=offset)

    if kind is EntityKind.CASO:

        @router.put("/valorar/{entity_id}", response_model=RecordResponse)
        async def assess_record(
            body: AssessmentRequest = Body(...),
            context: AuthorizationContext = Depends(authorize_item(kind, *ASSESS_ROLES)),
            entities: EntityRepository = Depends(get_entity_repository),
        ):
            """Record the caller's assessment in the field owned by their role."""
            field = ASSESSMENT_FIELDS[context.principal.role.casefold()]
            record = entities.update(EntityRef(kind, context.entity_id), {field: body.valor})
            if record is None:
                raise NotFoundError("Entity not found")
            return record

    @router.get("/{entity_id}", response_model=RecordResponse)
    async def get_record(
        context: AuthorizationContext = Depends(authorize_item(kind, *READ_ROLES)),
        entities: EntityRepository = Depends(get_entity_repository),
    ):
        record = entities.get(EntityRef(kind, context.entity_id))
        if record is None:
            raise NotFoundError("Entity not found")
        return record

    @router.put("/{entity_id}", response_model=RecordResponse)
    async def update_record(
        payload: dict[str, Any] = Body(...),
        context: AuthorizationContext = Depends(authorize_item(kind, *UPDATE_ROLES)),
        entities: EntityRepository = Depends(get_entity_repository),
    ):
        """Merge fields into a record. Its area cannot be changed."""
        record = entities.update(EntityRef(kind, context.entity_id), payload)
        if record is None:
            raise NotFoundError("Entity not found")
        return record

    @router.delete("/{entity_id}", status_code=204)
    async def delete_record(
        context: AuthorizationContext = Depends(authorize_item(kind, *DELETE_ROLES)),
        entities: EntityRepository = Depends(get_entity_repository),
    ):
        if not entities.delete(EntityRef(kind, context.entity_id)):
            raise NotFoundError("Entity not found")
        return Response(status_code=204)

    return router


router = APIRouter()
for _kind in EntityKind:
    router.include_router(build_records_router(_kind))
