"""
Custom exceptions for the Academy LMS application.

This module provides the exception taxonomy of the progression engine and
the DRF exception handler that turns it into API responses.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LMSBaseException(Exception):
    """Base exception for all Academy LMS custom exceptions."""

    default_message = "Ha ocurrido un error en el sistema."
    default_code = "lms_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = None, code: str = None, details: dict = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        return self.message


# Progression Exceptions
class ProgressionError(LMSBaseException):
    """Base exception for course progression errors."""

    default_message = "Error en el progreso del curso."
    default_code = "progression_error"


class AlreadyCompleted(ProgressionError):
    """
    Raised when a completion already exists for the (learner, entity) pair.

    Benign: callers treat it as a no-op success.
    """

    default_message = "Este contenido ya fue completado."
    default_code = "already_completed"
    status_code = status.HTTP_200_OK


class CompletionBlocked(ProgressionError):
    """Raised when a completion gate rejects the write. The reason is user-facing."""

    default_message = "No es posible completar este contenido."
    default_code = "completion_blocked"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str = None, code: str = None, details: dict = None):
        super().__init__(reason, code, details)
        self.reason = self.message


class NotEnrolled(ProgressionError):
    """Raised when the learner is not enrolled in the course."""

    default_message = "No estás inscrito en este curso."
    default_code = "not_enrolled"
    status_code = status.HTTP_403_FORBIDDEN


# Assessment Exceptions
class AssessmentError(LMSBaseException):
    """Base exception for quiz-related errors."""

    default_message = "Error en la evaluación."
    default_code = "assessment_error"


class AttemptsExhausted(AssessmentError):
    """Raised when every allowed attempt of a quiz has been used."""

    default_message = "Has alcanzado el máximo de intentos para esta evaluación."
    default_code = "attempts_exhausted"
    status_code = status.HTTP_409_CONFLICT


class AttemptAlreadySubmitted(AssessmentError):
    """Raised when answers are written to an attempt that is already completed."""

    default_message = "Este intento ya fue enviado."
    default_code = "attempt_already_submitted"
    status_code = status.HTTP_409_CONFLICT


class InvalidAnswer(AssessmentError):
    """Raised for an answer to an unknown question or an out-of-range option."""

    default_message = "La respuesta no es válida."
    default_code = "invalid_answer"


class QuizzesDisabled(AssessmentError):
    """Raised when quizzes are disabled platform-wide."""

    default_message = "Las evaluaciones están deshabilitadas en la plataforma."
    default_code = "quizzes_disabled"
    status_code = status.HTTP_403_FORBIDDEN


# Certification Exceptions
class CertificationError(LMSBaseException):
    """Base exception for certification-related errors."""

    default_message = "Error en la certificacion."
    default_code = "certification_error"


class CertificateGenerationError(CertificationError):
    """Exception raised when certificate generation fails."""

    default_message = "Error generando el certificado."
    default_code = "certificate_generation_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Storage Exceptions
class StoreUnavailable(LMSBaseException):
    """
    Raised when the record store rejects or cannot serve a write.

    Transient and retryable. ``details["partially_applied"]`` tells the caller
    whether anything was persisted before the failure.
    """

    default_message = "El almacenamiento no está disponible. Intenta de nuevo."
    default_code = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = None, code: str = None, details: dict = None):
        details = {"partially_applied": False, **(details or {})}
        super().__init__(message, code, details)

    @property
    def partially_applied(self) -> bool:
        return bool(self.details.get("partially_applied"))


def api_exception_handler(exc, context):
    """
    DRF exception handler that renders LMS exceptions as
    ``{"error": ..., "code": ..., "details": ...}``.
    """
    if isinstance(exc, LMSBaseException):
        if isinstance(exc, StoreUnavailable):
            logger.warning(f"Store unavailable in {context.get('view').__class__.__name__}: {exc}")
        return Response(
            {"error": exc.message, "code": exc.code, "details": exc.details},
            status=exc.status_code,
        )

    return exception_handler(exc, context)
