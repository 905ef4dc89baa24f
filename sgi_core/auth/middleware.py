"""
FastAPI auth middleware.

Authenticates requests via Authorization Bearer token and attaches an
AuthContext (user id, role, home area) to request.state.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from sgi_core.auth.jwt_service import JwtService
from sgi_core.domain.auth import AuthContext, Principal, Role

# Endpoints that don't require authentication
PUBLIC_PATHS = frozenset(
    {
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
        "/metrics",
        "/auth/login",
        "/auth/refresh",
    }
)

DEV_USER_ID = "00000000-0000-0000-0000-000000000000"


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware to authenticate requests via JWT.

    When enabled (require_auth=True), all requests to non-public paths
    must include a valid Bearer access token. The principal decoded from
    it is attached to request.state.auth as an AuthContext.

    When disabled (require_auth=False), a local admin context is injected.
    """

    def __init__(
        self,
        app,
        require_auth: bool = True,
        jwt_service: JwtService | None = None,
        dev_area: str = "",
    ):
        """Initialize auth middleware.

        Args:
            app: The FastAPI/Starlette application.
            require_auth: If True, enforce authentication. If False, inject dev context.
            jwt_service: Token verifier. Built lazily from settings when None.
            dev_area: Home area of the injected dev principal.
        """
        super().__init__(app)
        self.require_auth = require_auth
        self._jwt_service = jwt_service
        self.dev_area = dev_area

    @property
    def jwt_service(self) -> JwtService | None:
        """Lazily initialize JWT service to avoid import-time issues."""
        if self._jwt_service is None:
            from sgi_core.config import settings

            if settings.JWT_SECRET:
                self._jwt_service = JwtService()
        return self._jwt_service

    def _try_bearer_auth(self, request: Request, request_id: str) -> AuthContext | None:
        """Try to authenticate via Bearer JWT token."""
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        if not self.jwt_service:
            logger.debug(f"[{request_id}] JWT service not configured")
            return None

        token = auth_header[7:]

        try:
            payload = self.jwt_service.verify_access_token(token)
        except Exception as e:
            logger.error(f"[{request_id}] JWT verification error: {e}")
            return None

        if not payload:
            return None

        return AuthContext(
            principal=Principal(
                user_id=payload["sub"],
                role=payload["role"],
                area=payload["area"],
            ),
            authenticated_at=datetime.now(timezone.utc),
            request_id=request_id,
        )

    async def dispatch(self, request: Request, call_next):
        """Process incoming request for authentication."""
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id

        path = request.url.path.rstrip("/")

        if path in PUBLIC_PATHS or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if not self.require_auth:
            request.state.auth = AuthContext(
                principal=Principal(
                    user_id=DEV_USER_ID,
                    role=Role.ADMIN.value,
                    area=self.dev_area,
                ),
                authenticated_at=datetime.now(timezone.utc),
                request_id=request_id,
            )
            return await call_next(request)

        auth_context = self._try_bearer_auth(request, request_id)

        if not auth_context:
            if request.headers.get("Authorization"):
                logger.warning(f"[{request_id}] Invalid Bearer token for {path}")
                return JSONResponse(
                    status_code=401,
                    content={"error": "Invalid or expired token"},
                )
            logger.warning(f"[{request_id}] Missing auth credentials for {path}")
            return JSONResponse(
                status_code=401,
                content={"error": "Authentication required"},
            )

        request.state.auth = auth_context

        logger.debug(
            f"[{request_id}] Authenticated: user={auth_context.user_id} "
            f"role={auth_context.principal.role} area={auth_context.principal.area}"
        )

        return await call_next(request)
