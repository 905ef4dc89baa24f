"""
Auth module for the SGI records service.

Provides user authentication, JWT tokens, middleware, and authorization
dependencies.
"""

from sgi_core.auth.dependencies import (
    authorize_collection,
    authorize_item,
    get_auth_context,
    get_principal,
    require_roles,
)
from sgi_core.auth.jwt_service import JwtService
from sgi_core.auth.middleware import AuthMiddleware
from sgi_core.auth.user_service import UserService

__all__ = [
    "AuthMiddleware",
    "JwtService",
    "UserService",
    "authorize_collection",
    "authorize_item",
    "get_auth_context",
    "get_principal",
    "require_roles",
]
