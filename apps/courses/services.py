"""
Business logic services for course progression.

- CompletionLedger: append-only record of finished content items.
- ProgressAggregator: derived progress and completion eligibility.
- ProgressionService: completion gates, course completion and certificates.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from apps.assessments.models import Quiz
from apps.assessments.services import QuizAttemptTracker, passing_score_for
from apps.certifications.services import CertificateService
from apps.core.exceptions import (
    AlreadyCompleted,
    CompletionBlocked,
    NotEnrolled,
    StoreUnavailable,
)
from apps.core.utils import percent
from apps.courses.models import (
    ContentCompletion,
    Course,
    CourseCompletion,
    CourseSection,
    Enrollment,
    SectionContent,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseProgress:
    completed_count: int
    total_content_count: int
    progress_percent: float
    published_completed_count: int
    published_total_count: int
    is_eligible_for_completion: bool

    @classmethod
    def empty(cls):
        return cls(0, 0, 0.0, 0, 0, False)


@dataclass(frozen=True)
class CompletionCheck:
    can_complete: bool
    reason: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class RecordedCompletion:
    completion: ContentCompletion
    progress: CourseProgress
    can_finalize_course: bool


@dataclass(frozen=True)
class CourseCompletionResult:
    completion: CourseCompletion
    certificate: Optional[object]
    created: bool


class EnrollmentService:
    """Service for enrollment management."""

    @staticmethod
    def is_enrolled(user, course: Course) -> bool:
        return Enrollment.objects.filter(user=user, course=course).exists()

    @staticmethod
    def enroll_user(user, course: Course) -> Enrollment:
        """Enroll a user in a course. Enrolling twice returns the existing enrollment."""
        enrollment, created = Enrollment.objects.get_or_create(user=user, course=course)
        if created:
            logger.info(f"User {user.id} enrolled in course {course.id}")
        return enrollment


class CompletionLedger:
    """
    Append-only ledger of content completions.

    There is no update or delete: a completion is a permanent fact.
    """

    @staticmethod
    def is_completed(user, content: SectionContent) -> bool:
        return ContentCompletion.objects.filter(user=user, content=content).exists()

    @staticmethod
    def completed_ids(user, content_ids) -> set:
        """Ids among ``content_ids`` the learner has completed."""
        return set(
            ContentCompletion.objects.filter(user=user, content_id__in=list(content_ids)).values_list(
                "content_id", flat=True
            )
        )

    @staticmethod
    def record_completion(user, content: SectionContent) -> ContentCompletion:
        """
        Record that the learner finished a content item.

        Raises AlreadyCompleted if a completion exists for the pair, including
        when a concurrent request inserted it first.
        """
        if CompletionLedger.is_completed(user, content):
            raise AlreadyCompleted()

        try:
            with transaction.atomic():
                completion = ContentCompletion.objects.create(
                    user=user,
                    content=content,
                    completed_at=timezone.now(),
                    time_spent_minutes=1,
                )
        except IntegrityError as e:
            raise AlreadyCompleted() from e
        except DatabaseError as e:
            logger.error(f"Error recording completion of content {content.id} for user {user.id}: {e}")
            raise StoreUnavailable() from e

        logger.info(f"Content {content.id} completed by user {user.id}")
        return completion


class ProgressAggregator:
    """Derived progress over a course's full content graph."""

    @staticmethod
    def section_is_visible(section: CourseSection, now=None) -> bool:
        return section.is_visible(now)

    @staticmethod
    def content_is_published(content: SectionContent, now=None) -> bool:
        return content.is_published and content.section.is_visible(now)

    @staticmethod
    def get_progress(user, course: Course, now=None) -> CourseProgress:
        """
        Progress over every content item, published or not; completion
        eligibility over the published subset only.

        Read errors degrade to an empty, non-eligible progress.
        """
        now = now or timezone.now()
        try:
            contents = list(
                SectionContent.objects.filter(section__course=course).select_related("section")
            )
            completed = CompletionLedger.completed_ids(user, [c.id for c in contents])
        except DatabaseError as e:
            logger.warning(f"Could not compute progress of course {course.id} for user {user.id}: {e}")
            return CourseProgress.empty()

        published = [c for c in contents if ProgressAggregator.content_is_published(c, now)]
        completed_count = sum(1 for c in contents if c.id in completed)
        published_completed = sum(1 for c in published if c.id in completed)

        return CourseProgress(
            completed_count=completed_count,
            total_content_count=len(contents),
            progress_percent=percent(completed_count, len(contents)),
            published_completed_count=published_completed,
            published_total_count=len(published),
            is_eligible_for_completion=(
                len(published) > 0 and published_completed == len(published)
            ),
        )

    @staticmethod
    def visible_contents(course: Course, now=None) -> list:
        """Published content of visible sections, in course order."""
        now = now or timezone.now()
        sections = CourseSection.objects.visible(now).filter(course=course)
        return list(
            SectionContent.objects.filter(section__in=sections, is_published=True)
            .select_related("section")
            .order_by("section__order", "section_id", "order", "id")
        )

    @staticmethod
    def next_content(user, course: Course, last_viewed_id=None, now=None) -> Optional[SectionContent]:
        """
        Content item to resume the course at.

        The caller's last-viewed hint wins while it is still visible;
        otherwise the first visible incomplete item, else the first visible
        item.
        """
        contents = ProgressAggregator.visible_contents(course, now)
        if not contents:
            return None

        if last_viewed_id is not None:
            for content in contents:
                if str(content.id) == str(last_viewed_id):
                    return content

        completed = CompletionLedger.completed_ids(user, [c.id for c in contents])
        for content in contents:
            if content.id not in completed:
                return content
        return contents[0]


class ProgressionService:
    """
    Entry point for learner progression: completing content, finalizing the
    course and fetching the certificate.
    """

    @staticmethod
    def get_progress(user, course: Course, now=None) -> CourseProgress:
        return ProgressAggregator.get_progress(user, course, now)

    @staticmethod
    def _quiz_for(content: SectionContent):
        quiz_id = content.quiz_id
        if quiz_id is None:
            return None
        return Quiz.objects.filter(pk=quiz_id).first()

    @staticmethod
    def can_complete_content(user, content: SectionContent, now=None) -> CompletionCheck:
        """
        Check whether the learner may mark a content item as completed.

        Quiz items additionally require at least one completed attempt,
        whatever its score.
        """
        if CompletionLedger.is_completed(user, content):
            return CompletionCheck(False, AlreadyCompleted.default_message, AlreadyCompleted.default_code)

        course = content.section.course
        if not EnrollmentService.is_enrolled(user, course):
            return CompletionCheck(False, NotEnrolled.default_message, NotEnrolled.default_code)

        if not user.is_course_admin and not ProgressAggregator.content_is_published(content, now):
            return CompletionCheck(False, "Este contenido aún no está disponible.", "not_published")

        if content.is_quiz and settings.LMS_QUIZZES_ENABLED:
            quiz = ProgressionService._quiz_for(content)
            if quiz is None:
                return CompletionCheck(
                    False, "Este contenido no tiene una evaluación asociada.", "quiz_missing"
                )
            summary = QuizAttemptTracker.summarize(user, quiz, passing_score_for(quiz, content))
            if summary.total_attempts == 0:
                return CompletionCheck(
                    False,
                    "Debes presentar la evaluación antes de marcar este contenido como completado.",
                    "quiz_not_attempted",
                )

        return CompletionCheck(True)

    @staticmethod
    def record_completion(user, content: SectionContent, now=None) -> RecordedCompletion:
        """
        Record a content completion once its gates pass.

        Raises AlreadyCompleted for a duplicate, NotEnrolled outside the course
        and CompletionBlocked for any other gate. The result says whether the learner may now finalize the
        course.
        """
        check = ProgressionService.can_complete_content(user, content, now)
        if not check.can_complete:
            if check.code == AlreadyCompleted.default_code:
                raise AlreadyCompleted()
            if check.code == NotEnrolled.default_code:
                raise NotEnrolled()
            raise CompletionBlocked(check.reason, details={"reason_code": check.code})

        completion = CompletionLedger.record_completion(user, content)

        course = content.section.course
        progress = ProgressAggregator.get_progress(user, course, now)
        can_finalize = (
            progress.is_eligible_for_completion
            and not CourseCompletion.objects.filter(user=user, course=course).exists()
        )
        if can_finalize:
            logger.info(f"User {user.id} is eligible to complete course {course.id}")

        return RecordedCompletion(completion=completion, progress=progress, can_finalize_course=can_finalize)

    @staticmethod
    def complete_course(user, course: Course, now=None) -> CourseCompletionResult:
        """
        Mark the course as completed and issue the certificate when due.

        The completion and the certificate row are written in one
        transaction. Calling again returns the existing completion, issuing
        the certificate if it is due but missing.
        """
        if not EnrollmentService.is_enrolled(user, course):
            raise NotEnrolled()

        certificates_due = CertificateService.certificates_enabled(course)

        existing = CourseCompletion.objects.filter(user=user, course=course).first()
        if existing:
            return ProgressionService._existing_completion(user, course, existing, certificates_due)

        progress = ProgressAggregator.get_progress(user, course, now)
        if not progress.is_eligible_for_completion:
            raise CompletionBlocked(
                "Debes completar todo el contenido publicado antes de finalizar el curso.",
                details={
                    "reason_code": "not_eligible",
                    "published_completed_count": progress.published_completed_count,
                    "published_total_count": progress.published_total_count,
                },
            )

        try:
            with transaction.atomic():
                completion = CourseCompletion.objects.create(
                    user=user,
                    course=course,
                    completion_percentage=100,
                    completed_at=now or timezone.now(),
                )
                certificate = (
                    CertificateService.issue_for_completion(user, course) if certificates_due else None
                )
        except IntegrityError:
            existing = CourseCompletion.objects.filter(user=user, course=course).first()
            if existing is None:
                raise
            return ProgressionService._existing_completion(user, course, existing, certificates_due)
        except DatabaseError as e:
            logger.error(f"Error completing course {course.id} for user {user.id}: {e}")
            raise StoreUnavailable(details={"partially_applied": False}) from e

        logger.info(f"Course {course.id} completed by user {user.id}")
        return CourseCompletionResult(completion=completion, certificate=certificate, created=True)

    @staticmethod
    def _existing_completion(user, course, completion, certificates_due) -> CourseCompletionResult:
        certificate = None
        if certificates_due:
            try:
                with transaction.atomic():
                    certificate = CertificateService.issue_for_completion(user, course)
            except DatabaseError as e:
                logger.error(f"Error issuing certificate for course {course.id} to user {user.id}: {e}")
                raise StoreUnavailable(details={"partially_applied": True}) from e
        return CourseCompletionResult(completion=completion, certificate=certificate, created=False)

    @staticmethod
    def get_certificate(user, course: Course):
        """Learner's certificate for the course, or None."""
        return CertificateService.get_certificate(user, course)
