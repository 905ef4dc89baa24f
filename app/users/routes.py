"""
User administration routes.

Admins create users (assigning role and area), list them, reset
passwords and deactivate accounts. Superusers may read single users.
"""

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field

from app.auth.routes import get_jwt_service, get_user_service
from sgi_core.auth import require_roles
from sgi_core.auth.jwt_service import JwtService
from sgi_core.auth.user_service import UserService
from sgi_core.domain.auth import Principal, Role
from sgi_core.runtime.errors import BadRequestError, ConflictError, NotFoundError

router = APIRouter(prefix="/users", tags=["users"])


class CreateUserRequest(BaseModel):
    correo: str
    password: str = Field(..., min_length=8)
    area: str
    role: str = Role.USER.value
    nombre: str = ""
    apellido: str = ""
    cedula: str | None = None


class PasswordRequest(BaseModel):
    password: str = Field(..., min_length=8)


class UserOut(BaseModel):
    user_id: str
    nombre: str
    apellido: str
    cedula: str | None = None
    correo: str
    role: str
    area: str
    is_active: bool
    created_at: str | None = None
    last_login_at: str | None = None


@router.post("", response_model=UserOut, status_code=201)
async def create_user(
    body: CreateUserRequest = Body(...),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    """Create a user in one of the configured areas."""
    try:
        user = user_service.create_user(
            correo=body.correo,
            password=body.password,
            area=body.area,
            role=body.role,
            nombre=body.nombre,
            apellido=body.apellido,
            cedula=body.cedula,
        )
    except ValueError as e:
        raise BadRequestError(str(e))
    except RuntimeError as e:
        raise ConflictError(str(e))
    return UserOut(**user)


@router.get("", response_model=list[UserOut])
async def list_users(
    area: str | None = Query(default=None),
    role: str | None = Query(default=None),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    try:
        users = user_service.list_users(area=area, role=role)
    except ValueError as e:
        raise BadRequestError(str(e))
    return [UserOut(**u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    _: Principal = Depends(require_roles(Role.ADMIN, Role.SUPERUSER)),
    user_service: UserService = Depends(get_user_service),
):
    user = user_service.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return UserOut(**user)


@router.put("/{user_id}/password")
async def update_password(
    user_id: str,
    body: PasswordRequest = Body(...),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """Reset a password and revoke the user's refresh tokens."""
    try:
        updated = user_service.update_password(user_id, body.password)
    except ValueError as e:
        raise BadRequestError(str(e))
    if not updated:
        raise NotFoundError("User not found")
    jwt_service.revoke_all_for_user(user_id)
    return {"message": "Password updated"}


@router.delete("/{user_id}", status_code=204)
async def deactivate_user(
    user_id: str,
    _: Principal = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """Deactivate a user; existing access tokens lapse at their expiry."""
    if user_service.get_by_id(user_id) is None or not user_service.deactivate(user_id):
        raise NotFoundError("User not found")
    jwt_service.revoke_all_for_user(user_id)
