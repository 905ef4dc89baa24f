"""
Authentication routes for the user login flow.

Provides endpoints for:
- Login (email/password → access JWT + refresh token)
- Token refresh
- Logout (revoke all refresh tokens)
- Current user info
"""

from fastapi import APIRouter, Body, Depends, Request
from pydantic import BaseModel

from sgi_core.auth import get_auth_context
from sgi_core.auth.jwt_service import JwtService
from sgi_core.auth.user_service import UserService
from sgi_core.config import settings
from sgi_core.domain.auth import AuthContext
from sgi_core.infrastructure.rate_limiter import limiter
from sgi_core.runtime.errors import NotFoundError, UnauthorizedError


router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Login request."""

    correo: str
    password: str


class LoginResponse(BaseModel):
    """Login response."""

    access_token: str
    refresh_token: str
    expires_in: int
    user: dict


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(BaseModel):
    """Token refresh response."""

    access_token: str
    expires_in: int


class LogoutResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    """Current user response."""

    user_id: str
    correo: str
    nombre: str
    apellido: str
    role: str
    area: str


# =============================================================================
# Service Factories
# =============================================================================


def get_user_service() -> UserService:
    """Get user service instance."""
    return UserService()


def get_jwt_service() -> JwtService:
    """Get JWT service instance."""
    return JwtService()


# =============================================================================
# Routes
# =============================================================================


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    login_request: LoginRequest = Body(...),
    user_service: UserService = Depends(get_user_service),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """Authenticate user and return tokens.

    The access token carries the user's id, role and area; it is the only
    source of those values for every later authorization decision.
    """
    user = user_service.authenticate(login_request.correo, login_request.password)
    if not user:
        raise UnauthorizedError("Correo o contraseña incorrectos")

    access_token = jwt_service.create_access_token(
        user_id=user["user_id"],
        role=user["role"],
        area=user["area"],
    )
    refresh_token = jwt_service.create_refresh_token(user["user_id"])

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_ACCESS_TTL,
        user={
            "user_id": user["user_id"],
            "correo": user["correo"],
            "role": user["role"],
            "area": user["area"],
        },
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    refresh_request: RefreshRequest = Body(...),
    user_service: UserService = Depends(get_user_service),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """Exchange a refresh token for a new access token.

    Role and area are re-read from the user record, so changes made by an
    admin take effect on the next refresh. Does not rotate the refresh token.
    """
    user_id = jwt_service.verify_refresh_token(refresh_request.refresh_token)
    if not user_id:
        raise UnauthorizedError("Invalid or expired refresh token")

    user = user_service.get_by_id(user_id)
    if not user or not user["is_active"]:
        raise UnauthorizedError("User not found or inactive")

    access_token = jwt_service.create_access_token(
        user_id=user["user_id"],
        role=user["role"],
        area=user["area"],
    )

    return RefreshResponse(
        access_token=access_token,
        expires_in=settings.JWT_ACCESS_TTL,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """Logout and revoke every refresh token of the caller."""
    jwt_service.revoke_all_for_user(auth.user_id)
    return LogoutResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    user_service: UserService = Depends(get_user_service),
):
    """Get current authenticated user."""
    user = user_service.get_by_id(auth.user_id)

    if not user:
        raise NotFoundError("User not found")

    return UserResponse(
        user_id=user["user_id"],
        correo=user["correo"],
        nombre=user["nombre"],
        apellido=user["apellido"],
        role=user["role"],
        area=user["area"],
    )
