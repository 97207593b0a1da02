"""
Certification models for Academy LMS.
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.validators import (
    validate_certificate_fields,
    validate_certificate_number,
    validate_hex_color,
)


class CertificateTemplate(BaseModel):
    """
    Background image plus the position of each text field on the certificate.

    ``field_settings`` maps ``student_name``, ``course_name``,
    ``completion_date`` and ``certificate_number`` to
    ``{"x", "y", "font_size", "font_color", "font_family"}``. Coordinates
    are in PDF points from the bottom-left corner.
    """

    name = models.CharField(_("Nombre"), max_length=200)
    description = models.TextField(_("Descripción"), blank=True)
    background_image = models.ImageField(
        _("Imagen de fondo"),
        upload_to="certificates/backgrounds/",
        blank=True,
        null=True,
    )
    field_settings = models.JSONField(
        _("Posición de los campos"),
        default=dict,
        validators=[validate_certificate_fields],
    )
    is_active = models.BooleanField(_("Activo"), default=True)

    class Meta:
        db_table = "certificate_templates"
        verbose_name = _("Plantilla de certificado")
        verbose_name_plural = _("Plantillas de certificado")
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        errors = []
        for key, value in (self.field_settings or {}).items():
            color = value.get("font_color") if isinstance(value, dict) else None
            if not isinstance(color, str):
                continue
            try:
                validate_hex_color(color)
            except ValidationError as e:
                errors.extend(f"{key}: {message}" for message in e.messages)
        if errors:
            raise ValidationError({"field_settings": errors})

    def field(self, key):
        """Settings for one field, or None when the template does not place it."""
        value = (self.field_settings or {}).get(key)
        return value if isinstance(value, dict) else None


class Certificate(models.Model):
    """
    Certificate issued to a learner for a completed course.

    At most one per (learner, course). The rendered document is attached by
    a background task after the row is committed.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="certificates",
        verbose_name=_("Usuario"),
    )
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="certificates",
        verbose_name=_("Curso"),
    )
    template = models.ForeignKey(
        CertificateTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="certificates",
        verbose_name=_("Plantilla"),
    )
    certificate_number = models.CharField(
        _("Número de certificado"),
        max_length=50,
        unique=True,
        validators=[validate_certificate_number],
    )
    issued_at = models.DateTimeField(_("Fecha de emisión"), default=timezone.now)
    certificate_file = models.FileField(
        _("Archivo de certificado"),
        upload_to="certificates/issued/",
        blank=True,
        null=True,
    )
    verification_url = models.URLField(_("URL de verificación"), blank=True)
    metadata = models.JSONField(_("Metadatos"), default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "certificates"
        verbose_name = _("Certificado")
        verbose_name_plural = _("Certificados")
        ordering = ["-issued_at"]
        unique_together = ["user", "course"]

    def __str__(self):
        return f"{self.certificate_number} - {self.user}"

    @property
    def is_rendered(self):
        return bool(self.certificate_file)


class CertificateVerification(models.Model):
    """
    Log of certificate verification attempts.
    """

    certificate = models.ForeignKey(
        Certificate,
        on_delete=models.CASCADE,
        related_name="verifications",
        verbose_name=_("Certificado"),
    )
    verified_at = models.DateTimeField(_("Fecha de verificación"), auto_now_add=True)
    ip_address = models.GenericIPAddressField(_("Dirección IP"), null=True, blank=True)
    user_agent = models.TextField(_("User Agent"), blank=True)

    class Meta:
        db_table = "certificate_verifications"
        verbose_name = _("Verificación de certificado")
        verbose_name_plural = _("Verificaciones de certificado")
        ordering = ["-verified_at"]

    def __str__(self):
        return f"{self.certificate} - {self.verified_at}"
