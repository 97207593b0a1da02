"""
API views for courses app.
"""

from django.db.models import Prefetch
from django.shortcuts import get_object_or_404

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.certifications.api.serializers import CertificateSerializer
from apps.core.permissions import is_course_admin
from apps.courses.models import Course, CourseSection, SectionContent
from apps.courses.services import (
    CompletionLedger,
    EnrollmentService,
    ProgressAggregator,
    ProgressionService,
)

from .serializers import (
    CompletionCheckSerializer,
    ContentCompletionSerializer,
    CourseCompletionSerializer,
    CourseListSerializer,
    CourseProgressSerializer,
    CourseSectionSerializer,
    CourseSerializer,
    EnrollmentSerializer,
    SectionContentSerializer,
)


class CourseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Course graph and the learner's progression actions on it.

    Learners see published courses; course admins see every course
    including unpublished sections and content.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        if self.action == "list":
            return CourseListSerializer
        return CourseSerializer

    def get_queryset(self):
        queryset = Course.objects.prefetch_related(
            Prefetch("sections", queryset=CourseSection.objects.order_by("order", "id")),
            Prefetch("sections__contents", queryset=SectionContent.objects.order_by("order", "id")),
        )

        if not is_course_admin(self.request):
            queryset = queryset.filter(status=Course.Status.PUBLISHED)

        status_filter = self.request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        search = self.request.query_params.get("search")
        if search:
            queryset = queryset.filter(title__icontains=search)

        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["include_unpublished"] = is_course_admin(self.request)
        if self.action == "retrieve" and self.request.user.is_authenticated:
            course_id = self.kwargs.get("pk")
            content_ids = SectionContent.objects.filter(section__course_id=course_id).values_list(
                "id", flat=True
            )
            context["completed_ids"] = CompletionLedger.completed_ids(self.request.user, content_ids)
        return context

    @action(detail=True, methods=["get"])
    def progress(self, request, pk=None):
        """Get the current user's progress in the course."""
        course = self.get_object()
        progress = ProgressionService.get_progress(request.user, course)
        return Response(CourseProgressSerializer(progress).data)

    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        """Enroll the current user in the course."""
        course = self.get_object()
        enrollment = EnrollmentService.enroll_user(request.user, course)
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        """Finalize the course for the current user."""
        course = self.get_object()
        result = ProgressionService.complete_course(request.user, course)

        certificate = result.certificate
        return Response(
            {
                "completion": CourseCompletionSerializer(result.completion).data,
                "certificate": CertificateSerializer(certificate).data if certificate else None,
                "created": result.created,
            },
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["get"])
    def certificate(self, request, pk=None):
        """Get the current user's certificate for the course, or null."""
        course = self.get_object()
        certificate = ProgressionService.get_certificate(request.user, course)
        return Response(
            {"certificate": CertificateSerializer(certificate).data if certificate else None}
        )

    @action(detail=True, methods=["get"], url_path="next-content")
    def next_content(self, request, pk=None):
        """Content item to resume at; ``last_viewed`` is the client's hint."""
        course = self.get_object()
        content = ProgressAggregator.next_content(
            request.user,
            course,
            last_viewed_id=request.query_params.get("last_viewed"),
        )
        if content is None:
            return Response({"content": None})
        return Response({"content": SectionContentSerializer(content).data})


class CourseSectionViewSet(viewsets.ReadOnlyModelViewSet):
    """Sections of a course, visible ones only for learners."""

    serializer_class = CourseSectionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        course = get_object_or_404(Course, pk=self.kwargs.get("course_pk"))
        if is_course_admin(self.request):
            queryset = CourseSection.objects.filter(course=course)
        else:
            queryset = CourseSection.objects.visible().filter(
                course=course, course__status=Course.Status.PUBLISHED
            )
        return queryset.prefetch_related("contents").order_by("order", "id")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["include_unpublished"] = is_course_admin(self.request)
        return context


class SectionContentViewSet(viewsets.ReadOnlyModelViewSet):
    """Content items and their completion by the current user."""

    serializer_class = SectionContentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = SectionContent.objects.select_related("section", "section__course")
        if not is_course_admin(self.request):
            queryset = queryset.filter(
                is_published=True,
                section__in=CourseSection.objects.visible(),
                section__course__status=Course.Status.PUBLISHED,
            )

        course_id = self.request.query_params.get("course")
        if course_id:
            queryset = queryset.filter(section__course_id=course_id)

        return queryset.order_by("section__order", "order", "id")

    @action(detail=True, methods=["get"], url_path="can-complete")
    def can_complete(self, request, pk=None):
        """Check whether the current user may mark this content as completed."""
        content = self.get_object()
        check = ProgressionService.can_complete_content(request.user, content)
        return Response(CompletionCheckSerializer(check).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        """Mark this content as completed by the current user."""
        content = self.get_object()
        recorded = ProgressionService.record_completion(request.user, content)
        return Response(
            {
                "completion": ContentCompletionSerializer(recorded.completion).data,
                "progress": CourseProgressSerializer(recorded.progress).data,
                "can_finalize_course": recorded.can_finalize_course,
            },
            status=status.HTTP_201_CREATED,
        )
