import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.core.validators


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("courses", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CertificateTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Fecha de creación")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Fecha de actualización")),
                ("name", models.CharField(max_length=200, verbose_name="Nombre")),
                ("description", models.TextField(blank=True, verbose_name="Descripción")),
                (
                    "background_image",
                    models.ImageField(
                        blank=True,
                        null=True,
                        upload_to="certificates/backgrounds/",
                        verbose_name="Imagen de fondo",
                    ),
                ),
                (
                    "field_settings",
                    models.JSONField(
                        default=dict,
                        validators=[apps.core.validators.validate_certificate_fields],
                        verbose_name="Posición de los campos",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Activo")),
            ],
            options={
                "verbose_name": "Plantilla de certificado",
                "verbose_name_plural": "Plantillas de certificado",
                "db_table": "certificate_templates",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Certificate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "certificate_number",
                    models.CharField(
                        max_length=50,
                        unique=True,
                        validators=[apps.core.validators.validate_certificate_number],
                        verbose_name="Número de certificado",
                    ),
                ),
                (
                    "issued_at",
                    models.DateTimeField(default=django.utils.timezone.now, verbose_name="Fecha de emisión"),
                ),
                (
                    "certificate_file",
                    models.FileField(
                        blank=True,
                        null=True,
                        upload_to="certificates/issued/",
                        verbose_name="Archivo de certificado",
                    ),
                ),
                ("verification_url", models.URLField(blank=True, verbose_name="URL de verificación")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadatos")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="certificates",
                        to="courses.course",
                        verbose_name="Curso",
                    ),
                ),
                (
                    "template",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="certificates",
                        to="certifications.certificatetemplate",
                        verbose_name="Plantilla",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="certificates",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Certificado",
                "verbose_name_plural": "Certificados",
                "db_table": "certificates",
                "ordering": ["-issued_at"],
                "unique_together": {("user", "course")},
            },
        ),
        migrations.CreateModel(
            name="CertificateVerification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("verified_at", models.DateTimeField(auto_now_add=True, verbose_name="Fecha de verificación")),
                (
                    "ip_address",
                    models.GenericIPAddressField(blank=True, null=True, verbose_name="Dirección IP"),
                ),
                ("user_agent", models.TextField(blank=True, verbose_name="User Agent")),
                (
                    "certificate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="verifications",
                        to="certifications.certificate",
                        verbose_name="Certificado",
                    ),
                ),
            ],
            options={
                "verbose_name": "Verificación de certificado",
                "verbose_name_plural": "Verificaciones de certificado",
                "db_table": "certificate_verifications",
                "ordering": ["-verified_at"],
            },
        ),
    ]
