"""
Tests for certification tasks.
"""

from unittest.mock import patch

import pytest

from apps.certifications.services import CertificateService
from apps.certifications.tasks import render_certificate_document

from .factories import CertificateFactory


@pytest.mark.django_db
class TestRenderCertificateDocument:
    """Tests for render_certificate_document."""

    def test_renders_and_returns_file_name(self):
        certificate = CertificateFactory()

        file_name = render_certificate_document(certificate.id)

        certificate.refresh_from_db()
        assert file_name == certificate.certificate_file.name

    def test_missing_certificate(self):
        assert render_certificate_document(999999) is None

    def test_renderer_failure_is_not_retried(self, settings):
        settings.CERTIFICATE_RENDERER = "apps.certifications.tests.test_services.BrokenRenderer"
        certificate = CertificateFactory()

        assert render_certificate_document(certificate.id) is None

        certificate.refresh_from_db()
        assert "render_error" in certificate.metadata

    def test_storage_failure_is_retried(self):
        certificate = CertificateFactory()

        with patch.object(CertificateService, "render_document", side_effect=OSError("bucket unavailable")):
            with pytest.raises(OSError):
                render_certificate_document(certificate.id)

        certificate.refresh_from_db()
        assert certificate.metadata["render_error"] == "bucket unavailable"
