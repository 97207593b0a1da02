"""
Admin configuration for courses app.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import (
    ContentCompletion,
    Course,
    CourseCompletion,
    CourseSection,
    Enrollment,
    SectionContent,
)


class CourseSectionInline(admin.TabularInline):
    """Inline for sections in course admin."""

    model = CourseSection
    extra = 1
    ordering = ["order"]
    fields = ["title", "order", "is_published", "published_at"]


class SectionContentInline(admin.TabularInline):
    """Inline for content items in section admin."""

    model = SectionContent
    extra = 1
    ordering = ["order"]
    fields = ["title", "content_type", "order", "is_published", "duration_minutes"]


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    """Admin configuration for Course model."""

    list_display = ["title", "status", "enable_certificates", "created_by", "created_at"]
    list_filter = ["status", "enable_certificates", "created_at"]
    search_fields = ["title", "description"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["created_by"]
    inlines = [CourseSectionInline]

    fieldsets = [
        (None, {"fields": ["title", "description", "status"]}),
        (_("Certificación"), {"fields": ["enable_certificates", "certificate_template"]}),
        (
            _("Auditoría"),
            {"fields": ["created_by", "created_at", "updated_at"], "classes": ["collapse"]},
        ),
    ]

    def save_model(self, request, obj, form, change):
        if not change and not obj.created_by_id:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(CourseSection)
class CourseSectionAdmin(admin.ModelAdmin):
    """Admin configuration for CourseSection model."""

    list_display = ["title", "course", "order", "is_published", "published_at"]
    list_filter = ["is_published", "course"]
    search_fields = ["title", "course__title"]
    ordering = ["course", "order"]
    inlines = [SectionContentInline]


@admin.register(SectionContent)
class SectionContentAdmin(admin.ModelAdmin):
    """Admin configuration for SectionContent model."""

    list_display = ["title", "section", "content_type", "order", "is_published"]
    list_filter = ["content_type", "is_published"]
    search_fields = ["title", "section__title", "section__course__title"]
    ordering = ["section", "order"]


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ["user", "course", "enrolled_at"]
    search_fields = ["user__email", "course__title"]
    raw_id_fields = ["user", "course"]


@admin.register(ContentCompletion)
class ContentCompletionAdmin(admin.ModelAdmin):
    """Completions are permanent: the admin only reads them."""

    list_display = ["user", "content", "completed_at", "time_spent_minutes"]
    search_fields = ["user__email", "content__title"]
    raw_id_fields = ["user", "content"]
    date_hierarchy = "completed_at"

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CourseCompletion)
class CourseCompletionAdmin(admin.ModelAdmin):
    list_display = ["user", "course", "completion_percentage", "completed_at"]
    search_fields = ["user__email", "course__title"]
    raw_id_fields = ["user", "course"]

    def has_change_permission(self, request, obj=None):
        return False
