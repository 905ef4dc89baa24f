"""
Standardized error model with retry semantics and HTTP mapping.

This module defines a hierarchy of service errors that classify whether
an error is retryable and which HTTP status it surfaces as. Every error
is terminal for the one request that raised it, never for the process.
"""

from __future__ import annotations

import uuid
from typing import Any


# Common error codes
class ErrorCode:
    """Standard error codes for common failure scenarios."""

    # Storage
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

    # Authentication/Authorization
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED_ENTITY = "UNSUPPORTED_ENTITY"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ServiceError(Exception):
    """Standardized service error with retry classification.

    ServiceError carries structured information about failures:
    - code: Machine-readable error code (e.g., "NOT_FOUND")
    - message_safe: Human-readable message safe for logs/users
    - message_debug: Detailed debug info (never rendered to clients)
    - retryable: Whether the operation can be retried
    - status_code: HTTP status the error surfaces as
    - extra: Additional fields merged into the response body
    - debug_id: Unique ID for support correlation
    """

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        """Initialize a ServiceError.

        Args:
            code: Machine-readable error code.
            message_safe: Human-readable message safe for logs.
            message_debug: Optional detailed debug message.
            retryable: Whether the operation can be retried.
            cause: Optional underlying exception.
            debug_id: Optional correlation ID (auto-generated if None).
            extra: Optional fields merged into the response body.
        """
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]
        self.extra = dict(extra or {})

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"retryable={self.retryable}, "
            f"debug_id={self.debug_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body returned to API clients.

        Returns:
            Dictionary with the error message and any extra fields
            (excludes debug info).
        """
        return {"error": self.message_safe, **self.extra}


class RetryableError(ServiceError):
    """Error that indicates the operation can be retried.

    Use this for transient failures like a database that refuses
    connections.
    """

    status_code = 503

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=True,
            cause=cause,
            debug_id=debug_id,
            extra=extra,
        )


class TerminalError(ServiceError):
    """Error that indicates the operation should not be retried.

    Use this for permanent failures like:
    - Invalid input (400)
    - Authorization failures (401, 403)
    - Resource not found (404)
    - Business rule violations (409)
    """

    status_code = 400

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=False,
            cause=cause,
            debug_id=debug_id,
            extra=extra,
        )


class BadRequestError(TerminalError):
    """Invalid input or an unroutable entity type."""

    status_code = 400

    def __init__(self, message: str, code: str = ErrorCode.INVALID_INPUT, **kwargs: Any):
        super().__init__(code=code, message_safe=message, **kwargs)


class UnauthorizedError(TerminalError):
    """No valid principal could be resolved for the request."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated", **kwargs: Any):
        super().__init__(code=ErrorCode.UNAUTHORIZED, message_safe=message, **kwargs)


class ForbiddenError(TerminalError):
    """Role, area or grant checks failed."""

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have access to this resource",
        entity_area: str | None = None,
        entity_name: str | None = None,
        **kwargs: Any,
    ):
        extra = dict(kwargs.pop("extra", None) or {})
        if entity_area is not None:
            extra["entityArea"] = entity_area
        if entity_name is not None:
            extra["entityName"] = entity_name
        super().__init__(
            code=ErrorCode.FORBIDDEN, message_safe=message, extra=extra, **kwargs
        )
        self.entity_area = entity_area
        self.entity_name = entity_name


class NotFoundError(TerminalError):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Entity not found", **kwargs: Any):
        super().__init__(code=ErrorCode.NOT_FOUND, message_safe=message, **kwargs)


class ConflictError(TerminalError):
    """The write collides with existing state (duplicate keys, names)."""

    status_code = 409

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(code=ErrorCode.CONFLICT, message_safe=message, **kwargs)


class StorageUnavailableError(RetryableError):
    """The backing PostgreSQL database could not be reached."""

    def __init__(self, message: str = "Storage temporarily unavailable", **kwargs: Any):
        super().__init__(code=ErrorCode.STORAGE_UNAVAILABLE, message_safe=message, **kwargs)
