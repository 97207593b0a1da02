"""
Business logic services for certifications.
"""

import logging
import uuid
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.certifications.models import Certificate, CertificateVerification
from apps.certifications.renderers import get_certificate_renderer
from apps.core.exceptions import CertificateGenerationError

logger = logging.getLogger(__name__)

# Attempts at drawing a certificate number that is not taken yet
MAX_NUMBER_ATTEMPTS = 5


class CertificateService:
    """Service for certificate operations."""

    @staticmethod
    def certificates_enabled(course) -> bool:
        """Certificates are issued when both the platform and the course allow it."""
        return bool(settings.LMS_CERTIFICATES_ENABLED and course.enable_certificates)

    @staticmethod
    def generate_certificate_number() -> str:
        """
        Generate a certificate number.
        Format: PREFIX-YYYYMM-XXXXXXXX
        """
        now = timezone.now()
        date_part = now.strftime("%Y%m")
        unique_part = uuid.uuid4().hex[:8].upper()
        return f"{settings.CERTIFICATE_NUMBER_PREFIX}-{date_part}-{unique_part}"

    @staticmethod
    def build_verification_url(certificate_number: str) -> str:
        base_url = settings.SITE_URL.rstrip("/")
        return f"{base_url}/certificates/verify/{certificate_number}/"

    @staticmethod
    def get_certificate(user, course) -> Optional[Certificate]:
        """
        Certificate for a learner and course, or None.

        Always None when certificates are disabled for the course.
        """
        if not CertificateService.certificates_enabled(course):
            return None
        return Certificate.objects.filter(user=user, course=course).first()

    @staticmethod
    def issue_for_completion(user, course) -> Certificate:
        """
        Return the learner's certificate for the course, creating it if needed.

        Callers run this inside the transaction that records the course
        completion; rendering is queued for after that transaction commits.
        """
        existing = Certificate.objects.filter(user=user, course=course).first()
        if existing:
            return existing

        now = timezone.now()
        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            number = CertificateService.generate_certificate_number()
            try:
                with transaction.atomic():
                    certificate = Certificate.objects.create(
                        user=user,
                        course=course,
                        template=course.certificate_template,
                        certificate_number=number,
                        issued_at=now,
                        verification_url=CertificateService.build_verification_url(number),
                    )
                break
            except IntegrityError:
                existing = Certificate.objects.filter(user=user, course=course).first()
                if existing:
                    return existing
                logger.warning(f"Certificate number collision on {number} (attempt {attempt})")
        else:
            raise CertificateGenerationError(
                "No fue posible generar un número de certificado único.",
                details={"user_id": user.id, "course_id": course.id},
            )

        transaction.on_commit(lambda: CertificateService.queue_rendering(certificate))
        logger.info(
            f"Certificate {certificate.certificate_number} issued to user {user.id} for course {course.id}"
        )
        return certificate

    @staticmethod
    def queue_rendering(certificate: Certificate):
        from apps.certifications.tasks import render_certificate_document

        render_certificate_document.delay(certificate.id)

    @staticmethod
    def render_document(certificate: Certificate) -> Certificate:
        """
        Render the certificate document and attach it to the certificate.

        Renderer failures are recorded in ``metadata["render_error"]`` and
        raised as CertificateGenerationError; the certificate itself stays.
        """
        renderer = get_certificate_renderer()
        try:
            document = renderer.render(
                learner_name=certificate.user.get_full_name() or certificate.user.email,
                course_title=certificate.course.title,
                issue_date=timezone.localdate(certificate.issued_at),
                certificate_number=certificate.certificate_number,
                template=certificate.template,
                verification_url=certificate.verification_url,
            )
        except Exception as e:
            logger.exception(f"Error rendering certificate {certificate.certificate_number}: {e}")
            CertificateService.record_render_error(certificate, e)
            raise CertificateGenerationError(
                details={"certificate_number": certificate.certificate_number}
            ) from e

        filename = f"cert_{certificate.certificate_number}.pdf"
        certificate.certificate_file.save(filename, ContentFile(document), save=False)
        certificate.metadata.pop("render_error", None)
        certificate.metadata["rendered_at"] = timezone.now().isoformat()
        certificate.save(update_fields=["certificate_file", "metadata", "updated_at"])

        logger.info(f"Certificate document rendered: {certificate.certificate_number}")
        return certificate

    @staticmethod
    def record_render_error(certificate: Certificate, error: Exception):
        certificate.metadata["render_error"] = str(error) or error.__class__.__name__
        certificate.save(update_fields=["metadata", "updated_at"])

    @staticmethod
    def verify_certificate(
        certificate_number: str,
        ip_address: str = None,
        user_agent: str = "",
    ) -> dict:
        """
        Verify a certificate by its number.
        """
        certificate = (
            Certificate.objects.select_related("user", "course")
            .filter(certificate_number=certificate_number)
            .first()
        )

        if not certificate:
            return {
                "valid": False,
                "reason": "Certificado no encontrado",
                "certificate": None,
            }

        CertificateVerification.objects.create(
            certificate=certificate,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return {
            "valid": True,
            "certificate": {
                "number": certificate.certificate_number,
                "user_name": certificate.user.get_full_name(),
                "course_title": certificate.course.title,
                "issued_at": certificate.issued_at.isoformat(),
            },
        }

    @staticmethod
    def get_user_certificates(user):
        """
        Get all certificates for a user.
        """
        return (
            Certificate.objects.filter(user=user)
            .select_related("course", "template")
            .order_by("-issued_at")
        )
