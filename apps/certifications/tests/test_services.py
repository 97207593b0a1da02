"""
Tests for certifications services and renderers.
"""

from datetime import date

import pytest

from apps.accounts.tests.factories import UserFactory
from apps.certifications.models import Certificate, CertificateVerification
from apps.certifications.renderers import (
    CertificateRenderer,
    ReportLabCertificateRenderer,
    get_certificate_renderer,
)
from apps.certifications.services import CertificateService
from apps.core.exceptions import CertificateGenerationError
from apps.core.validators import validate_certificate_number
from apps.courses.tests.factories import CourseFactory

from .factories import CertificateFactory, CertificateTemplateFactory


class BrokenRenderer(CertificateRenderer):
    def render(self, *args, **kwargs):
        raise ValueError("Fuente corrupta")


@pytest.mark.django_db
class TestIssueCertificate:
    """Tests for CertificateService.issue_for_completion."""

    def test_generate_certificate_number(self):
        number = CertificateService.generate_certificate_number()

        validate_certificate_number(number)
        assert number.startswith("TEST-")

    def test_issue(self):
        user = UserFactory()
        template = CertificateTemplateFactory()
        course = CourseFactory(certificate_template=template)

        certificate = CertificateService.issue_for_completion(user, course)

        assert certificate.template == template
        assert certificate.verification_url == (
            f"https://lms.test/certificates/verify/{certificate.certificate_number}/"
        )
        assert certificate.is_rendered is False

    def test_issue_is_idempotent(self):
        user = UserFactory()
        course = CourseFactory()

        first = CertificateService.issue_for_completion(user, course)
        second = CertificateService.issue_for_completion(user, course)

        assert first.pk == second.pk
        assert Certificate.objects.filter(user=user, course=course).count() == 1

    def test_number_collision_draws_again(self, monkeypatch):
        taken = CertificateFactory()
        numbers = iter([taken.certificate_number, "TEST-202601-0000ABCD"])
        monkeypatch.setattr(
            CertificateService, "generate_certificate_number", staticmethod(lambda: next(numbers))
        )

        certificate = CertificateService.issue_for_completion(UserFactory(), CourseFactory())

        assert certificate.certificate_number == "TEST-202601-0000ABCD"

    def test_gives_up_after_repeated_collisions(self, monkeypatch):
        taken = CertificateFactory()
        monkeypatch.setattr(
            CertificateService,
            "generate_certificate_number",
            staticmethod(lambda: taken.certificate_number),
        )

        with pytest.raises(CertificateGenerationError):
            CertificateService.issue_for_completion(UserFactory(), CourseFactory())

    def test_rendering_is_queued_after_commit(self, django_capture_on_commit_callbacks, monkeypatch):
        queued = []
        monkeypatch.setattr(CertificateService, "queue_rendering", staticmethod(queued.append))

        with django_capture_on_commit_callbacks(execute=True):
            certificate = CertificateService.issue_for_completion(UserFactory(), CourseFactory())

        assert queued == [certificate]

    def test_get_certificate_when_disabled(self):
        certificate = CertificateFactory(course=CourseFactory(enable_certificates=False))

        assert CertificateService.get_certificate(certificate.user, certificate.course) is None


@pytest.mark.django_db
class TestRenderDocument:
    """Tests for CertificateService.render_document."""

    def test_render_default_layout(self):
        certificate = CertificateFactory()

        CertificateService.render_document(certificate)

        certificate.refresh_from_db()
        assert certificate.is_rendered
        assert certificate.certificate_file.name.endswith(f"cert_{certificate.certificate_number}.pdf")
        assert "rendered_at" in certificate.metadata
        with certificate.certificate_file.open("rb") as document:
            assert document.read(4) == b"%PDF"

    def test_render_with_template(self):
        template = CertificateTemplateFactory(
            field_settings={
                "student_name": {"x": 396, "y": 300, "font_family": "Fuente-Inexistente"},
                "certificate_number": {"x": 396, "y": 100, "font_size": 10},
            }
        )
        certificate = CertificateFactory(template=template)

        CertificateService.render_document(certificate)

        assert certificate.is_rendered

    def test_renderer_failure_is_recorded(self, settings):
        settings.CERTIFICATE_RENDERER = "apps.certifications.tests.test_services.BrokenRenderer"
        certificate = CertificateFactory(metadata={})

        with pytest.raises(CertificateGenerationError):
            CertificateService.render_document(certificate)

        certificate.refresh_from_db()
        assert certificate.metadata["render_error"] == "Fuente corrupta"
        assert certificate.is_rendered is False

    def test_configured_renderer(self, settings):
        settings.CERTIFICATE_RENDERER = "apps.certifications.renderers.ReportLabCertificateRenderer"

        assert isinstance(get_certificate_renderer(), ReportLabCertificateRenderer)


class TestReportLabRenderer:
    """Tests for ReportLabCertificateRenderer without the database."""

    def test_render_returns_pdf(self):
        document = ReportLabCertificateRenderer().render(
            learner_name="Ana Gómez",
            course_title="Trabajo seguro en alturas",
            issue_date=date(2026, 3, 14),
            certificate_number="TEST-202603-1A2B3C4D",
            verification_url="https://lms.test/certificates/verify/TEST-202603-1A2B3C4D/",
        )

        assert document.startswith(b"%PDF")


@pytest.mark.django_db
class TestVerifyCertificate:
    """Tests for CertificateService.verify_certificate."""

    def test_valid(self):
        certificate = CertificateFactory()

        result = CertificateService.verify_certificate(
            certificate.certificate_number, ip_address="10.0.0.1", user_agent="pytest"
        )

        assert result["valid"] is True
        assert result["certificate"]["number"] == certificate.certificate_number
        assert result["certificate"]["course_title"] == certificate.course.title
        verification = CertificateVerification.objects.get(certificate=certificate)
        assert verification.ip_address == "10.0.0.1"

    def test_unknown(self):
        result = CertificateService.verify_certificate("TEST-202601-FFFFFFFF")

        assert result["valid"] is False
        assert not CertificateVerification.objects.exists()

    def test_user_certificates(self):
        user = UserFactory()
        CertificateFactory(user=user)
        CertificateFactory(user=user)
        CertificateFactory()

        assert CertificateService.get_user_certificates(user).count() == 2
