"""
Quiz models for Academy LMS.
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.validators import validate_question_options


class Quiz(BaseModel):
    """
    Graded quiz attached to a course.
    """

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="quizzes",
        verbose_name=_("Curso"),
    )
    title = models.CharField(_("Título"), max_length=200)
    description = models.TextField(_("Descripción"), blank=True)
    max_attempts = models.PositiveIntegerField(
        _("Intentos máximos"),
        default=3,
        validators=[MinValueValidator(1)],
    )
    time_limit = models.PositiveIntegerField(
        _("Tiempo límite (minutos)"),
        null=True,
        blank=True,
        help_text=_("Dejar vacío para sin límite de tiempo"),
    )

    class Meta:
        db_table = "quizzes"
        verbose_name = _("Evaluación")
        verbose_name_plural = _("Evaluaciones")
        ordering = ["title"]

    def __str__(self):
        return self.title

    @property
    def total_points(self):
        return self.questions.aggregate(total=models.Sum("points"))["total"] or 0


class Question(BaseModel):
    """
    Single-choice question in a quiz.

    ``options`` is a list of option labels; ``correct_option`` indexes into it.
    """

    quiz = models.ForeignKey(
        Quiz,
        on_delete=models.CASCADE,
        related_name="questions",
        verbose_name=_("Evaluación"),
    )
    text = models.TextField(_("Pregunta"))
    options = models.JSONField(
        _("Opciones"),
        default=list,
        validators=[validate_question_options],
    )
    correct_option = models.PositiveIntegerField(_("Opción correcta"))
    points = models.PositiveIntegerField(
        _("Puntos"),
        default=1,
        validators=[MinValueValidator(1)],
    )
    order = models.PositiveIntegerField(_("Orden"), default=0)

    class Meta:
        db_table = "questions"
        verbose_name = _("Pregunta")
        verbose_name_plural = _("Preguntas")
        ordering = ["order"]

    def __str__(self):
        return f"{self.quiz.title} - P{self.order}"

    def clean(self):
        if not isinstance(self.options, list) or len(self.options) < 2:
            raise ValidationError({"options": _("La pregunta debe tener al menos dos opciones.")})
        if self.correct_option is not None and self.correct_option >= len(self.options):
            raise ValidationError(
                {"correct_option": _("La opción correcta debe corresponder a una de las opciones.")}
            )

    def is_valid_option(self, option_index):
        return (
            isinstance(option_index, int)
            and not isinstance(option_index, bool)
            and 0 <= option_index < len(self.options)
        )


class QuizAttemptManager(models.Manager):
    """Custom manager for QuizAttempt model."""

    def completed(self):
        return self.filter(completed=True)

    def in_progress(self):
        return self.filter(completed=False)

    def for_user(self, user, quiz):
        return self.filter(user=user, quiz=quiz)


class QuizAttempt(models.Model):
    """
    Learner attempt at a quiz.

    Rows start incomplete with empty answers; once ``completed`` is set the
    row is never written again.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="quiz_attempts",
        verbose_name=_("Usuario"),
    )
    quiz = models.ForeignKey(
        Quiz,
        on_delete=models.CASCADE,
        related_name="attempts",
        verbose_name=_("Evaluación"),
    )
    answers = models.JSONField(
        _("Respuestas"),
        default=dict,
        blank=True,
        help_text=_("Id de pregunta -> índice de la opción elegida"),
    )
    score = models.PositiveIntegerField(_("Puntos obtenidos"), default=0)
    max_score = models.PositiveIntegerField(_("Puntos posibles"), default=0)
    completed = models.BooleanField(_("Completado"), default=False)
    started_at = models.DateTimeField(_("Fecha de inicio"))
    completed_at = models.DateTimeField(_("Fecha de envío"), null=True, blank=True)

    objects = QuizAttemptManager()

    class Meta:
        db_table = "quiz_attempts"
        verbose_name = _("Intento de evaluación")
        verbose_name_plural = _("Intentos de evaluación")
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["user", "quiz", "completed"], name="quiz_attemp_user_id_5c0e8b_idx"),
        ]

    def __str__(self):
        return f"{self.user} - {self.quiz} ({self.score}/{self.max_score})"

    @property
    def score_percent(self):
        """Raw percentage of points earned, 0 when the quiz has no points."""
        if not self.max_score:
            return 0.0
        return self.score / self.max_score * 100

    @property
    def time_spent_seconds(self):
        if not self.completed_at:
            return None
        return max(0, int((self.completed_at - self.started_at).total_seconds()))
