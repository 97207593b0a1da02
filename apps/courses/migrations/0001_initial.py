import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.core.validators


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Título")),
                ("description", models.TextField(blank=True, verbose_name="Descripción")),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Borrador"), ("published", "Publicado"), ("archived", "Archivado")],
                        default="draft",
                        max_length=20,
                        verbose_name="Estado",
                    ),
                ),
                (
                    "enable_certificates",
                    models.BooleanField(
                        default=True,
                        help_text="Si al completar el curso se emite un certificado",
                        verbose_name="Emite certificado",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="courses_created",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Creado por",
                    ),
                ),
            ],
            options={
                "verbose_name": "Curso",
                "verbose_name_plural": "Cursos",
                "db_table": "courses",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="CourseSection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Título")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Orden")),
                ("is_published", models.BooleanField(default=False, verbose_name="Publicada")),
                ("published_at", models.DateTimeField(blank=True, null=True, verbose_name="Fecha de publicación")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sections",
                        to="courses.course",
                        verbose_name="Curso",
                    ),
                ),
            ],
            options={
                "verbose_name": "Sección",
                "verbose_name_plural": "Secciones",
                "db_table": "course_sections",
                "ordering": ["order"],
                "indexes": [models.Index(fields=["course", "order"], name="course_sect_course__9f1c2e_idx")],
            },
        ),
        migrations.CreateModel(
            name="SectionContent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Título")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Orden")),
                (
                    "content_type",
                    models.CharField(
                        choices=[
                            ("video", "Video"),
                            ("image", "Imagen"),
                            ("text", "Texto"),
                            ("quiz", "Evaluación"),
                            ("file", "Archivo"),
                        ],
                        max_length=20,
                        verbose_name="Tipo",
                    ),
                ),
                ("is_published", models.BooleanField(default=True, verbose_name="Publicado")),
                (
                    "duration_minutes",
                    models.PositiveIntegerField(
                        default=0,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="Duración (minutos)",
                    ),
                ),
                ("payload", models.JSONField(blank=True, default=dict, verbose_name="Contenido")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "section",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contents",
                        to="courses.coursesection",
                        verbose_name="Sección",
                    ),
                ),
            ],
            options={
                "verbose_name": "Contenido",
                "verbose_name_plural": "Contenidos",
                "db_table": "section_contents",
                "ordering": ["section__order", "order"],
                "indexes": [models.Index(fields=["section", "order"], name="section_con_section_4b7d1a_idx")],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "enrolled_at",
                    models.DateTimeField(default=django.utils.timezone.now, verbose_name="Fecha de inscripción"),
                ),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="courses.course",
                        verbose_name="Curso",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Inscripción",
                "verbose_name_plural": "Inscripciones",
                "db_table": "enrollments",
                "unique_together": {("user", "course")},
            },
        ),
        migrations.CreateModel(
            name="ContentCompletion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "completed_at",
                    models.DateTimeField(default=django.utils.timezone.now, verbose_name="Fecha de completado"),
                ),
                (
                    "time_spent_minutes",
                    models.PositiveIntegerField(default=1, verbose_name="Tiempo dedicado (minutos)"),
                ),
                (
                    "content",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="completions",
                        to="courses.sectioncontent",
                        verbose_name="Contenido",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="content_completions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Contenido completado",
                "verbose_name_plural": "Contenidos completados",
                "db_table": "content_completions",
                "ordering": ["-completed_at"],
                "unique_together": {("user", "content")},
            },
        ),
        migrations.CreateModel(
            name="CourseCompletion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "completion_percentage",
                    models.PositiveIntegerField(
                        default=100,
                        validators=[apps.core.validators.validate_percentage],
                        verbose_name="Porcentaje de completado",
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(default=django.utils.timezone.now, verbose_name="Fecha de completado"),
                ),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="completions",
                        to="courses.course",
                        verbose_name="Curso",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_completions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Curso completado",
                "verbose_name_plural": "Cursos completados",
                "db_table": "course_completions",
                "ordering": ["-completed_at"],
                "unique_together": {("user", "course")},
            },
        ),
    ]
