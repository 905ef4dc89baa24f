"""
Service runtime layer for the SGI records service.

This package provides the shared error model:
- ServiceError: Standardized errors with retry semantics
- TerminalError subclasses mapped onto HTTP statuses
"""

from .errors import (
    BadRequestError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    RetryableError,
    ServiceError,
    StorageUnavailableError,
    TerminalError,
    UnauthorizedError,
)

__all__ = [
    "BadRequestError",
    "ConflictError",
    "ErrorCode",
    "ForbiddenError",
    "NotFoundError",
    "RetryableError",
    "ServiceError",
    "StorageUnavailableError",
    "TerminalError",
    "UnauthorizedError",
]
