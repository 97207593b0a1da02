"""
Tests for the exception taxonomy and the API exception handler.
"""

from rest_framework import status
from rest_framework.exceptions import NotFound

from apps.core.exceptions import (
    AlreadyCompleted,
    AttemptsExhausted,
    CompletionBlocked,
    StoreUnavailable,
    api_exception_handler,
)


class TestExceptions:
    """Tests for custom exceptions."""

    def test_defaults(self):
        exc = AttemptsExhausted()
        assert exc.code == "attempts_exhausted"
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.details == {}
        assert str(exc) == exc.default_message

    def test_completion_blocked_keeps_reason(self):
        exc = CompletionBlocked("Debes presentar la evaluación.")
        assert exc.reason == "Debes presentar la evaluación."
        assert exc.code == "completion_blocked"

    def test_store_unavailable_defaults_to_nothing_applied(self):
        assert StoreUnavailable().partially_applied is False
        assert StoreUnavailable(details={"partially_applied": True}).partially_applied is True


class TestApiExceptionHandler:
    """Tests for api_exception_handler."""

    def test_renders_lms_exception(self):
        exc = CompletionBlocked("Bloqueado", details={"reason_code": "quiz_not_attempted"})
        response = api_exception_handler(exc, {"view": None})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data == {
            "error": "Bloqueado",
            "code": "completion_blocked",
            "details": {"reason_code": "quiz_not_attempted"},
        }

    def test_already_completed_is_not_an_error_status(self):
        response = api_exception_handler(AlreadyCompleted(), {"view": None})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["code"] == "already_completed"

    def test_store_unavailable(self):
        response = api_exception_handler(StoreUnavailable(), {"view": None})
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["details"] == {"partially_applied": False}

    def test_falls_back_to_drf_handler(self):
        response = api_exception_handler(NotFound(), {"view": None})
        assert response.status_code == status.HTTP_404_NOT_FOUND
