"""
Course, content and progression models for Academy LMS.
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.validators import validate_percentage, validate_quiz_payload


class CourseManager(models.Manager):
    """Custom manager for Course model."""

    def published(self):
        return self.filter(status="published")

    def draft(self):
        return self.filter(status="draft")

    def with_contents(self):
        return self.prefetch_related("sections__contents")


class CourseSectionManager(models.Manager):
    """Custom manager for CourseSection model."""

    def visible(self, now=None):
        """Sections that are published and whose publication date has arrived."""
        now = now or timezone.now()
        return self.filter(is_published=True).filter(
            models.Q(published_at__isnull=True) | models.Q(published_at__lte=now)
        )


class Course(models.Model):
    """
    Course model representing a training course.
    """

    class Status(models.TextChoices):
        DRAFT = "draft", _("Borrador")
        PUBLISHED = "published", _("Publicado")
        ARCHIVED = "archived", _("Archivado")

    title = models.CharField(_("Título"), max_length=200)
    description = models.TextField(_("Descripción"), blank=True)
    status = models.CharField(
        _("Estado"),
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    enable_certificates = models.BooleanField(
        _("Emite certificado"),
        default=True,
        help_text=_("Si al completar el curso se emite un certificado"),
    )
    certificate_template = models.ForeignKey(
        "certifications.CertificateTemplate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="courses",
        verbose_name=_("Plantilla de certificado"),
    )
    created_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.PROTECT,
        related_name="courses_created",
        verbose_name=_("Creado por"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CourseManager()

    class Meta:
        db_table = "courses"
        verbose_name = _("Curso")
        verbose_name_plural = _("Cursos")
        ordering = ["title"]

    def __str__(self):
        return self.title

    @property
    def total_duration(self):
        """Calculate total duration including all contents."""
        from django.db.models import Sum

        result = self.sections.aggregate(total=Sum("contents__duration_minutes"))
        return result["total"] or 0


class CourseSection(models.Model):
    """
    Ordered section of a course grouping content items.

    A section without ``published_at`` is visible as soon as it is published;
    a future ``published_at`` keeps it hidden until that instant.
    """

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="sections",
        verbose_name=_("Curso"),
    )
    title = models.CharField(_("Título"), max_length=200)
    order = models.PositiveIntegerField(_("Orden"), default=0)
    is_published = models.BooleanField(_("Publicada"), default=False)
    published_at = models.DateTimeField(_("Fecha de publicación"), null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CourseSectionManager()

    class Meta:
        db_table = "course_sections"
        verbose_name = _("Sección")
        verbose_name_plural = _("Secciones")
        ordering = ["order"]
        indexes = [
            models.Index(fields=["course", "order"], name="course_sect_course__9f1c2e_idx"),
        ]

    def __str__(self):
        return f"{self.course.title} - {self.title}"

    def is_visible(self, now=None):
        now = now or timezone.now()
        if not self.is_published:
            return False
        return self.published_at is None or self.published_at <= now


class SectionContent(models.Model):
    """
    Content item within a section.

    ``payload`` is opaque to the progression engine except for quiz items,
    which carry ``quiz_id`` and an optional ``passing_score`` override.
    """

    class ContentType(models.TextChoices):
        VIDEO = "video", _("Video")
        IMAGE = "image", _("Imagen")
        TEXT = "text", _("Texto")
        QUIZ = "quiz", _("Evaluación")
        FILE = "file", _("Archivo")

    section = models.ForeignKey(
        CourseSection,
        on_delete=models.CASCADE,
        related_name="contents",
        verbose_name=_("Sección"),
    )
    title = models.CharField(_("Título"), max_length=200)
    order = models.PositiveIntegerField(_("Orden"), default=0)
    content_type = models.CharField(
        _("Tipo"),
        max_length=20,
        choices=ContentType.choices,
    )
    is_published = models.BooleanField(_("Publicado"), default=True)
    duration_minutes = models.PositiveIntegerField(
        _("Duración (minutos)"),
        default=0,
        validators=[MinValueValidator(0)],
    )
    payload = models.JSONField(_("Contenido"), default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "section_contents"
        verbose_name = _("Contenido")
        verbose_name_plural = _("Contenidos")
        ordering = ["section__order", "order"]
        indexes = [
            models.Index(fields=["section", "order"], name="section_con_section_4b7d1a_idx"),
        ]

    def __str__(self):
        return f"{self.section.title} - {self.title}"

    def clean(self):
        if self.content_type == self.ContentType.QUIZ:
            validate_quiz_payload(self.payload)
            passing_score = self.payload.get("passing_score")
            if passing_score is not None:
                try:
                    validate_percentage(passing_score)
                except ValidationError as e:
                    raise ValidationError({"payload": e.messages}) from e

    @property
    def course(self):
        return self.section.course

    @property
    def is_quiz(self):
        return self.content_type == self.ContentType.QUIZ

    @property
    def quiz_id(self):
        """Referenced quiz id for quiz content, None otherwise."""
        if not self.is_quiz or not isinstance(self.payload, dict):
            return None
        return self.payload.get("quiz_id")


class Enrollment(models.Model):
    """
    User enrollment in a course.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Usuario"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Curso"),
    )
    enrolled_at = models.DateTimeField(_("Fecha de inscripción"), default=timezone.now)

    class Meta:
        db_table = "enrollments"
        verbose_name = _("Inscripción")
        verbose_name_plural = _("Inscripciones")
        unique_together = ["user", "course"]

    def __str__(self):
        return f"{self.user} - {self.course}"


class ContentCompletion(models.Model):
    """
    Record that a learner finished a content item.

    Append-only: rows are never updated or deleted by the engine.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="content_completions",
        verbose_name=_("Usuario"),
    )
    content = models.ForeignKey(
        SectionContent,
        on_delete=models.CASCADE,
        related_name="completions",
        verbose_name=_("Contenido"),
    )
    completed_at = models.DateTimeField(_("Fecha de completado"), default=timezone.now)
    time_spent_minutes = models.PositiveIntegerField(_("Tiempo dedicado (minutos)"), default=1)

    class Meta:
        db_table = "content_completions"
        verbose_name = _("Contenido completado")
        verbose_name_plural = _("Contenidos completados")
        unique_together = ["user", "content"]
        ordering = ["-completed_at"]

    def __str__(self):
        return f"{self.user} - {self.content}"


class CourseCompletion(models.Model):
    """
    Record that a learner finished a course.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="course_completions",
        verbose_name=_("Usuario"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="completions",
        verbose_name=_("Curso"),
    )
    completion_percentage = models.PositiveIntegerField(
        _("Porcentaje de completado"),
        default=100,
        validators=[validate_percentage],
    )
    completed_at = models.DateTimeField(_("Fecha de completado"), default=timezone.now)

    class Meta:
        db_table = "course_completions"
        verbose_name = _("Curso completado")
        verbose_name_plural = _("Cursos completados")
        unique_together = ["user", "course"]
        ordering = ["-completed_at"]

    def __str__(self):
        return f"{self.user} - {self.course} ({self.completion_percentage}%)"
