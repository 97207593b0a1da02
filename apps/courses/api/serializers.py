"""
Serializers for courses API.
"""

from rest_framework import serializers

from apps.courses.models import (
    ContentCompletion,
    Course,
    CourseCompletion,
    CourseSection,
    Enrollment,
    SectionContent,
)


class SectionContentSerializer(serializers.ModelSerializer):
    """Serializer for SectionContent model."""

    is_completed = serializers.SerializerMethodField()

    class Meta:
        model = SectionContent
        fields = [
            "id",
            "section",
            "title",
            "order",
            "content_type",
            "is_published",
            "duration_minutes",
            "payload",
            "is_completed",
        ]
        read_only_fields = fields

    def get_is_completed(self, obj):
        completed_ids = self.context.get("completed_ids")
        if completed_ids is None:
            return None
        return obj.id in completed_ids


class CourseSectionSerializer(serializers.ModelSerializer):
    """Serializer for CourseSection model with its visible contents."""

    contents = serializers.SerializerMethodField()

    class Meta:
        model = CourseSection
        fields = [
            "id",
            "title",
            "order",
            "is_published",
            "published_at",
            "contents",
        ]
        read_only_fields = fields

    def get_contents(self, obj):
        contents = obj.contents.all()
        if not self.context.get("include_unpublished"):
            contents = [c for c in contents if c.is_published]
        return SectionContentSerializer(contents, many=True, context=self.context).data


class CourseListSerializer(serializers.ModelSerializer):
    """Simplified serializer for course lists."""

    class Meta:
        model = Course
        fields = ["id", "title", "description", "status", "enable_certificates"]


class CourseSerializer(serializers.ModelSerializer):
    """Serializer for Course model with its section graph."""

    sections = serializers.SerializerMethodField()
    total_duration = serializers.IntegerField(read_only=True)

    class Meta:
        model = Course
        fields = [
            "id",
            "title",
            "description",
            "status",
            "enable_certificates",
            "total_duration",
            "sections",
        ]
        read_only_fields = fields

    def get_sections(self, obj):
        sections = obj.sections.all()
        if not self.context.get("include_unpublished"):
            sections = [s for s in sections if s.is_visible()]
        return CourseSectionSerializer(sections, many=True, context=self.context).data


class CourseProgressSerializer(serializers.Serializer):
    """Serializer for derived course progress."""

    completed_count = serializers.IntegerField()
    total_content_count = serializers.IntegerField()
    progress_percent = serializers.FloatField()
    published_completed_count = serializers.IntegerField()
    published_total_count = serializers.IntegerField()
    is_eligible_for_completion = serializers.BooleanField()


class CompletionCheckSerializer(serializers.Serializer):
    """Serializer for a content completion gate result."""

    can_complete = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    code = serializers.CharField(allow_null=True)


class ContentCompletionSerializer(serializers.ModelSerializer):
    """Serializer for ContentCompletion model."""

    class Meta:
        model = ContentCompletion
        fields = ["id", "user", "content", "completed_at", "time_spent_minutes"]
        read_only_fields = fields


class CourseCompletionSerializer(serializers.ModelSerializer):
    """Serializer for CourseCompletion model."""

    class Meta:
        model = CourseCompletion
        fields = ["id", "user", "course", "completion_percentage", "completed_at"]
        read_only_fields = fields


class EnrollmentSerializer(serializers.ModelSerializer):
    """Serializer for Enrollment model."""

    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Enrollment
        fields = ["id", "user", "course", "course_title", "enrolled_at"]
        read_only_fields = fields
