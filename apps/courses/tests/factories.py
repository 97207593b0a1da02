"""
Factory classes for courses tests.

Uses factory_boy to create test data for the course graph and the
progression records.
"""

from datetime import timedelta

from django.utils import timezone

import factory
from factory.django import DjangoModelFactory

from apps.accounts.tests.factories import CourseAdminFactory, UserFactory
from apps.courses.models import (
    ContentCompletion,
    Course,
    CourseCompletion,
    CourseSection,
    Enrollment,
    SectionContent,
)


class CourseFactory(DjangoModelFactory):
    """Factory for published courses."""

    class Meta:
        model = Course

    title = factory.Sequence(lambda n: f"Curso {n}")
    description = factory.Faker("paragraph", locale="es_ES")
    status = Course.Status.PUBLISHED
    enable_certificates = True
    created_by = factory.SubFactory(CourseAdminFactory)


class DraftCourseFactory(CourseFactory):
    status = Course.Status.DRAFT


class CourseSectionFactory(DjangoModelFactory):
    """Factory for visible sections."""

    class Meta:
        model = CourseSection

    course = factory.SubFactory(CourseFactory)
    title = factory.Sequence(lambda n: f"Sección {n}")
    order = factory.Sequence(lambda n: n)
    is_published = True
    published_at = None


class HiddenSectionFactory(CourseSectionFactory):
    is_published = False


class ScheduledSectionFactory(CourseSectionFactory):
    """Published section whose publication date is still in the future."""

    published_at = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))


class SectionContentFactory(DjangoModelFactory):
    """Factory for text content items."""

    class Meta:
        model = SectionContent

    section = factory.SubFactory(CourseSectionFactory)
    title = factory.Sequence(lambda n: f"Contenido {n}")
    order = factory.Sequence(lambda n: n)
    content_type = SectionContent.ContentType.TEXT
    is_published = True
    duration_minutes = 10
    payload = factory.LazyFunction(lambda: {"body": "Lorem ipsum"})


class UnpublishedContentFactory(SectionContentFactory):
    is_published = False


class QuizContentFactory(SectionContentFactory):
    """Quiz content item; pass ``payload={"quiz_id": quiz.id}``."""

    content_type = SectionContent.ContentType.QUIZ
    payload = factory.LazyFunction(dict)


class EnrollmentFactory(DjangoModelFactory):
    """Factory for Enrollment model."""

    class Meta:
        model = Enrollment

    user = factory.SubFactory(UserFactory)
    course = factory.SubFactory(CourseFactory)


class ContentCompletionFactory(DjangoModelFactory):
    """Factory for ContentCompletion model."""

    class Meta:
        model = ContentCompletion

    user = factory.SubFactory(UserFactory)
    content = factory.SubFactory(SectionContentFactory)


class CourseCompletionFactory(DjangoModelFactory):
    """Factory for CourseCompletion model."""

    class Meta:
        model = CourseCompletion

    user = factory.SubFactory(UserFactory)
    course = factory.SubFactory(CourseFactory)
    completion_percentage = 100
