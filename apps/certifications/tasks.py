"""
Celery tasks for certificate documents.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def render_certificate_document(self, certificate_id: int):
    """
    Render the PDF for an issued certificate and attach it.

    Renderer errors are recorded on the certificate and not retried; storage
    errors are retried with exponential backoff.
    """
    from apps.certifications.models import Certificate
    from apps.certifications.services import CertificateService
    from apps.core.exceptions import CertificateGenerationError

    try:
        certificate = Certificate.objects.select_related("user", "course", "template").get(
            id=certificate_id
        )
    except Certificate.DoesNotExist:
        logger.error(f"Certificate {certificate_id} not found")
        return None

    try:
        CertificateService.render_document(certificate)
    except CertificateGenerationError:
        logger.error(f"Certificate {certificate.certificate_number} could not be rendered")
        return None
    except OSError as e:
        logger.error(f"Error de almacenamiento para certificado {certificate_id}: {e}")
        CertificateService.record_render_error(certificate, e)
        raise self.retry(exc=e, countdown=60 * (2**self.request.retries))

    return certificate.certificate_file.name
