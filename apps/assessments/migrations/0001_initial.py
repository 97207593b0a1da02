import django.core.validators
import django.db.models.deletion
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
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Fecha de creación")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Fecha de actualización")),
                ("title", models.CharField(max_length=200, verbose_name="Título")),
                ("description", models.TextField(blank=True, verbose_name="Descripción")),
                (
                    "max_attempts",
                    models.PositiveIntegerField(
                        default=3,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Intentos máximos",
                    ),
                ),
                (
                    "time_limit",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Dejar vacío para sin límite de tiempo",
                        null=True,
                        verbose_name="Tiempo límite (minutos)",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quizzes",
                        to="courses.course",
                        verbose_name="Curso",
                    ),
                ),
            ],
            options={
                "verbose_name": "Evaluación",
                "verbose_name_plural": "Evaluaciones",
                "db_table": "quizzes",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Fecha de creación")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Fecha de actualización")),
                ("text", models.TextField(verbose_name="Pregunta")),
                (
                    "options",
                    models.JSONField(
                        default=list,
                        validators=[apps.core.validators.validate_question_options],
                        verbose_name="Opciones",
                    ),
                ),
                ("correct_option", models.PositiveIntegerField(verbose_name="Opción correcta")),
                (
                    "points",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Puntos",
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Orden")),
                (
                    "quiz",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="assessments.quiz",
                        verbose_name="Evaluación",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pregunta",
                "verbose_name_plural": "Preguntas",
                "db_table": "questions",
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "answers",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Id de pregunta -> índice de la opción elegida",
                        verbose_name="Respuestas",
                    ),
                ),
                ("score", models.PositiveIntegerField(default=0, verbose_name="Puntos obtenidos")),
                ("max_score", models.PositiveIntegerField(default=0, verbose_name="Puntos posibles")),
                ("completed", models.BooleanField(default=False, verbose_name="Completado")),
                ("started_at", models.DateTimeField(verbose_name="Fecha de inicio")),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="Fecha de envío")),
                (
                    "quiz",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attempts",
                        to="assessments.quiz",
                        verbose_name="Evaluación",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_attempts",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Intento de evaluación",
                "verbose_name_plural": "Intentos de evaluación",
                "db_table": "quiz_attempts",
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(fields=["user", "quiz", "completed"], name="quiz_attemp_user_id_5c0e8b_idx"),
                ],
            },
        ),
    ]
