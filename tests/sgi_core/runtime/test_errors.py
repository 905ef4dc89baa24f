"""Unit tests for the service error hierarchy."""

from __future__ import annotations

from sgi_core.runtime.errors import (
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


class TestStatusCodes:
    def test_terminal_errors_map_to_http_status(self):
        assert BadRequestError("bad").status_code == 400
        assert UnauthorizedError().status_code == 401
        assert ForbiddenError().status_code == 403
        assert NotFoundError().status_code == 404
        assert ConflictError("dup").status_code == 409

    def test_storage_unavailable_is_retryable(self):
        error = StorageUnavailableError()

        assert isinstance(error, RetryableError)
        assert error.retryable is True
        assert error.status_code == 503
        assert error.code == ErrorCode.STORAGE_UNAVAILABLE

    def test_terminal_errors_are_not_retryable(self):
        assert isinstance(NotFoundError(), TerminalError)
        assert NotFoundError().retryable is False


class TestToDict:
    def test_body_is_error_message(self):
        assert NotFoundError().to_dict() == {"error": "Entity not found"}

    def test_debug_message_is_never_rendered(self):
        error = StorageUnavailableError(message_debug="connection refused on 5432")

        assert "connection refused" not in str(error.to_dict())

    def test_forbidden_carries_entity_fields(self):
        error = ForbiddenError(entity_area="SEP", entity_name="Persona")

        assert error.to_dict() == {
            "error": "You do not have access to this resource",
            "entityArea": "SEP",
            "entityName": "Persona",
        }

    def test_forbidden_without_entity_has_no_extra_fields(self):
        assert set(ForbiddenError("nope").to_dict()) == {"error"}


def test_str_includes_code():
    error = ServiceError(code="X", message_safe="boom")

    assert str(error) == "[X] boom"
    assert len(error.debug_id) == 8
