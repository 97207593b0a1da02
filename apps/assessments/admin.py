"""
Admin configuration for assessments app.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Question, Quiz, QuizAttempt


class QuestionInline(admin.TabularInline):
    """Inline for questions in quiz admin."""

    model = Question
    extra = 1
    ordering = ["order"]
    fields = ["text", "options", "correct_option", "points", "order"]


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    """Admin configuration for Quiz model."""

    list_display = ["title", "course", "max_attempts", "time_limit", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["title", "description", "course__title"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [QuestionInline]
    autocomplete_fields = ["course"]

    fieldsets = [
        (None, {"fields": ["title", "description", "course"]}),
        (_("Configuración"), {"fields": ["max_attempts", "time_limit"]}),
        (
            _("Auditoría"),
            {"fields": ["created_at", "updated_at"], "classes": ["collapse"]},
        ),
    ]


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    """Admin configuration for QuizAttempt model (read-only)."""

    list_display = ["user", "quiz", "score", "max_score", "completed", "started_at", "completed_at"]
    list_filter = ["completed", "started_at"]
    search_fields = ["user__email", "quiz__title"]
    raw_id_fields = ["user", "quiz"]
    date_hierarchy = "started_at"

    def has_change_permission(self, request, obj=None):
        return False
