"""
FastAPI application for the SGI records service.

Mounts the auth, user administration, configuration, reporting and record
routers behind the JWT auth middleware.

Usage:
    uvicorn app.main:app --reload --port 8080
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.auth.routes import router as auth_router
from app.configuration.routes import router as configuration_router
from app.errors import register_exception_handlers
from app.gestion.routes import router as gestion_router
from app.records.routes import router as records_router
from app.users.routes import router as users_router
from sgi_core.auth.jwt_service import JwtService
from sgi_core.auth.middleware import AuthMiddleware
from sgi_core.config import settings
from sgi_core.infrastructure.rate_limiter import _rate_limit_exceeded_handler, limiter
from sgi_core.infrastructure.telemetry import TelemetryService, setup_telemetry
from sgi_core.logging import setup_logging

VERSION = "1.0.0"


def create_app(
    require_auth: bool | None = None,
    jwt_service: JwtService | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        require_auth: Enforce bearer auth. Defaults to settings.REQUIRE_AUTH.
        jwt_service: Token verifier for the auth middleware. Built from
            settings on first use when None.
    """
    setup_logging()
    setup_telemetry()

    app = FastAPI(
        title="SGI Records",
        description="Area-scoped record management API",
        version=VERSION,
    )

    TelemetryService().instrument_app(app)
    register_exception_handlers(app)

    # Rate limiter setup
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        AuthMiddleware,
        require_auth=settings.REQUIRE_AUTH if require_auth is None else require_auth,
        jwt_service=jwt_service,
        dev_area=settings.DEFAULT_AREAS[0] if settings.DEFAULT_AREAS else "",
    )

    # NOTE: CORS must be the last middleware added so it runs FIRST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(users_router, tags=["Users"])
    app.include_router(configuration_router, tags=["Configuration"])
    app.include_router(gestion_router, tags=["Gestion"])
    app.include_router(records_router)

    @app.get("/health")
    def health():
        """
        Health check endpoint.

        Returns:
            dict: Status and service information.
        """
        return {"status": "ok", "service": settings.SERVICE_NAME, "version": VERSION}

    return app


app = create_app()
