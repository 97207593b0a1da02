"""
Tests for assessments services.

Covers the attempt lifecycle, scoring, summaries and quiz analytics.
"""

from datetime import timedelta
from unittest.mock import patch

from django.db import DatabaseError

import pytest

from apps.accounts.tests.factories import UserFactory
from apps.assessments.models import QuizAttempt
from apps.assessments.services import (
    AttemptSession,
    QuizAnalyticsService,
    QuizAttemptTracker,
    passing_score_for,
    score_answers,
)
from apps.core.exceptions import (
    AssessmentError,
    AttemptAlreadySubmitted,
    AttemptsExhausted,
    InvalidAnswer,
    QuizzesDisabled,
    StoreUnavailable,
)
from apps.courses.tests.factories import (
    CourseSectionFactory,
    EnrollmentFactory,
    QuizContentFactory,
    ScheduledSectionFactory,
)

from .factories import (
    CompletedAttemptFactory,
    QuestionFactory,
    QuizAttemptFactory,
    QuizFactory,
    TimedQuizFactory,
)


@pytest.fixture
def learner():
    return UserFactory()


@pytest.fixture
def quiz():
    return QuizFactory(max_attempts=3)


@pytest.fixture
def weighted_quiz():
    """Quiz with questions worth 1, 2 and 3 points; option 0 is always correct."""
    quiz = QuizFactory()
    questions = [QuestionFactory(quiz=quiz, points=points, order=i) for i, points in enumerate([1, 2, 3])]
    return quiz, questions


@pytest.mark.django_db
class TestScoring:
    """Tests for score_answers."""

    def test_weighted_score(self, weighted_quiz):
        quiz, (q1, q2, q3) = weighted_quiz

        score, max_score = score_answers([q1, q2, q3], {str(q1.id): 0, str(q2.id): 1, str(q3.id): 0})

        assert (score, max_score) == (4, 6)

    def test_unanswered_questions_score_zero(self, weighted_quiz):
        quiz, questions = weighted_quiz

        assert score_answers(questions, {}) == (0, 6)

    def test_accepts_integer_keys(self, weighted_quiz):
        quiz, (q1, q2, q3) = weighted_quiz

        assert score_answers([q1, q2, q3], {q3.id: 0}) == (3, 6)

    def test_no_questions(self):
        assert score_answers([], {}) == (0, 0)


@pytest.mark.django_db
class TestStartAttempt:
    """Tests for QuizAttemptTracker.start_attempt."""

    def test_creates_in_progress_attempt(self, learner, quiz):
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        attempt = session.attempt
        assert attempt.pk is not None
        assert attempt.completed is False
        assert attempt.answers == {}
        assert attempt.started_at is not None
        assert attempt.completed_at is None

    def test_resumes_outstanding_attempt(self, learner, quiz):
        first = QuizAttemptTracker.start_attempt(learner, quiz)
        second = QuizAttemptTracker.start_attempt(learner, quiz)

        assert first.resumed is False
        assert second.resumed is True
        assert second.attempt.pk == first.attempt.pk
        assert QuizAttempt.objects.filter(user=learner, quiz=quiz).count() == 1

    def test_exhausted_after_max_attempts(self, learner, quiz):
        for _ in range(quiz.max_attempts):
            CompletedAttemptFactory(user=learner, quiz=quiz)

        with pytest.raises(AttemptsExhausted):
            QuizAttemptTracker.start_attempt(learner, quiz)

    def test_attempts_are_per_learner(self, learner, quiz):
        for _ in range(quiz.max_attempts):
            CompletedAttemptFactory(user=UserFactory(), quiz=quiz)

        assert QuizAttemptTracker.start_attempt(learner, quiz).attempt is not None

    def test_quizzes_disabled(self, learner, quiz, settings):
        settings.LMS_QUIZZES_ENABLED = False

        with pytest.raises(QuizzesDisabled):
            QuizAttemptTracker.start_attempt(learner, quiz)


@pytest.mark.django_db
class TestAttemptSession:
    """Tests for answering and finalizing an attempt."""

    def test_answers_are_held_locally(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        QuizAttemptTracker.answer_question(session, q1.id, 2)

        session.attempt.refresh_from_db()
        assert session.answers == {str(q1.id): 2}
        assert session.attempt.answers == {}

    def test_last_answer_wins(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        session.select_answer(q1.id, 2)
        session.select_answer(q1.id, 0)

        assert session.answers == {str(q1.id): 0}

    def test_unknown_question(self, learner, weighted_quiz):
        quiz, _ = weighted_quiz
        other = QuestionFactory()
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        with pytest.raises(InvalidAnswer):
            session.select_answer(other.id, 0)

    def test_option_out_of_range(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        with pytest.raises(InvalidAnswer):
            session.select_answer(q1.id, 3)

    def test_finalize_scores_and_completes(self, learner, weighted_quiz):
        quiz, (q1, q2, q3) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        session.select_answer(q1.id, 0)
        session.select_answer(q2.id, 1)
        session.select_answer(q3.id, 0)

        attempt = session.finalize()

        assert attempt.completed is True
        assert attempt.completed_at is not None
        assert attempt.score == 4
        assert attempt.max_score == 6
        assert attempt.answers == {str(q1.id): 0, str(q2.id): 1, str(q3.id): 0}
        assert QuizAttemptTracker.summarize(learner, quiz).best_score_percent == 67

    def test_finalize_twice_returns_stored_record(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        session.select_answer(q1.id, 0)

        first = session.finalize()
        second = session.finalize()

        assert second.pk == first.pk
        assert QuizAttempt.objects.completed().filter(user=learner, quiz=quiz).count() == 1

    def test_no_answers_after_submission(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        session.finalize()

        with pytest.raises(AttemptAlreadySubmitted):
            session.select_answer(q1.id, 0)

    def test_concurrent_finalize_transitions_once(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        attempt = QuizAttemptTracker.start_attempt(learner, quiz).attempt
        manual = AttemptSession(learner, quiz, attempt=attempt)
        timer = AttemptSession(learner, quiz, attempt=QuizAttempt.objects.get(pk=attempt.pk))
        manual.select_answer(q1.id, 0)
        timer.select_answer(q1.id, 1)

        submitted = manual.finalize()
        late = timer.finalize()

        assert late.pk == submitted.pk
        assert late.answers == {str(q1.id): 0}
        assert late.score == 1
        assert QuizAttempt.objects.filter(user=learner, quiz=quiz).count() == 1

    def test_finalize_without_stored_row_inserts_completed(self, learner, weighted_quiz):
        quiz, (q1, _, q3) = weighted_quiz

        attempt = QuizAttemptTracker.submit_attempt(learner, quiz, {q1.id: 0, q3.id: 0})

        assert attempt.completed is True
        assert attempt.score == 4
        assert attempt.started_at == attempt.completed_at

    def test_submit_finalizes_outstanding_in_place(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        started = QuizAttemptTracker.start_attempt(learner, quiz).attempt

        attempt = QuizAttemptTracker.submit_attempt(learner, quiz, {str(q1.id): 0})

        assert attempt.pk == started.pk
        assert attempt.score == 1
        assert QuizAttempt.objects.filter(user=learner, quiz=quiz).count() == 1

    def test_submit_completed_attempt_by_id_returns_stored(self, learner, weighted_quiz):
        quiz, (q1, q2, _) = weighted_quiz
        started = QuizAttemptTracker.start_attempt(learner, quiz).attempt
        submitted = QuizAttemptTracker.submit_attempt(learner, quiz, {q1.id: 0}, attempt_id=started.pk)

        repeated = QuizAttemptTracker.submit_attempt(learner, quiz, {q2.id: 0}, attempt_id=started.pk)

        assert repeated.pk == submitted.pk
        assert repeated.answers == {str(q1.id): 0}
        assert repeated.score == 1
        assert QuizAttempt.objects.filter(user=learner, quiz=quiz).count() == 1

    def test_submit_by_id_finalizes_that_attempt(self, learner, weighted_quiz):
        quiz, (q1, _, _) = weighted_quiz
        attempt = QuizAttemptFactory(user=learner, quiz=quiz)

        submitted = QuizAttemptTracker.submit_attempt(learner, quiz, {q1.id: 0}, attempt_id=attempt.pk)

        assert submitted.pk == attempt.pk
        assert submitted.completed is True

    def test_submit_other_learners_attempt_is_rejected(self, learner, quiz):
        attempt = QuizAttemptFactory(user=UserFactory(), quiz=quiz)

        with pytest.raises(AssessmentError) as exc_info:
            QuizAttemptTracker.submit_attempt(learner, quiz, {}, attempt_id=attempt.pk)

        assert exc_info.value.code == "attempt_not_found"
        assert QuizAttempt.objects.get(pk=attempt.pk).completed is False

    def test_insert_respects_max_attempts(self, learner, quiz):
        for _ in range(quiz.max_attempts):
            CompletedAttemptFactory(user=learner, quiz=quiz)

        with pytest.raises(AttemptsExhausted):
            QuizAttemptTracker.submit_attempt(learner, quiz, {})

    def test_zero_question_quiz(self, learner, quiz):
        attempt = QuizAttemptTracker.start_attempt(learner, quiz).finalize()

        assert (attempt.score, attempt.max_score) == (0, 0)
        assert QuizAttemptTracker.summarize(learner, quiz).best_score_percent == 0

    def test_write_failure(self, learner, weighted_quiz):
        quiz, _ = weighted_quiz
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        with patch(
            "apps.assessments.services.QuizAttempt.objects.filter",
            side_effect=DatabaseError("connection reset"),
        ):
            with pytest.raises(StoreUnavailable):
                session.finalize()

        session.attempt.refresh_from_db()
        assert session.attempt.completed is False


@pytest.mark.django_db
class TestTimeLimit:
    """Tests for timed attempts."""

    def test_untimed_quiz_has_no_deadline(self, learner, quiz):
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        assert session.deadline is None
        assert session.seconds_remaining() is None
        assert session.expire_if_due() is None

    def test_seconds_remaining(self, learner):
        quiz = TimedQuizFactory(time_limit=10)
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        started = session.attempt.started_at

        assert session.deadline == started + timedelta(minutes=10)
        assert session.seconds_remaining(started + timedelta(minutes=4)) == 360
        assert session.seconds_remaining(started + timedelta(minutes=11)) == 0

    def test_not_expired_yet(self, learner):
        quiz = TimedQuizFactory(time_limit=10)
        session = QuizAttemptTracker.start_attempt(learner, quiz)

        assert session.expire_if_due(session.attempt.started_at + timedelta(minutes=5)) is None
        session.attempt.refresh_from_db()
        assert session.attempt.completed is False

    def test_expiry_submits_held_answers(self, learner):
        quiz = TimedQuizFactory(time_limit=10)
        question = QuestionFactory(quiz=quiz, points=2)
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        session.select_answer(question.id, 0)

        attempt = session.expire_if_due(session.attempt.started_at + timedelta(minutes=10))

        assert attempt.completed is True
        assert attempt.score == 2

    def test_expiry_after_manual_submit_is_a_no_op(self, learner):
        quiz = TimedQuizFactory(time_limit=10)
        question = QuestionFactory(quiz=quiz)
        attempt = QuizAttemptTracker.start_attempt(learner, quiz).attempt
        timer = AttemptSession(learner, quiz, attempt=QuizAttempt.objects.get(pk=attempt.pk))
        timer.select_answer(question.id, 1)

        submitted = QuizAttemptTracker.submit_attempt(learner, quiz, {question.id: 0})
        expired = timer.expire_if_due(attempt.started_at + timedelta(minutes=10))

        assert expired.pk == submitted.pk
        assert expired.score == 1
        assert QuizAttempt.objects.completed().filter(user=learner, quiz=quiz).count() == 1

    def test_cancelled_session_never_writes(self, learner):
        quiz = TimedQuizFactory(time_limit=10)
        session = QuizAttemptTracker.start_attempt(learner, quiz)
        session.cancel()

        assert session.expire_if_due(session.attempt.started_at + timedelta(minutes=20)) is None
        with pytest.raises(AssessmentError) as exc_info:
            session.finalize()

        assert exc_info.value.code == "attempt_cancelled"
        session.attempt.refresh_from_db()
        assert session.attempt.completed is False


@pytest.mark.django_db
class TestSummarize:
    """Tests for QuizAttemptTracker.summarize."""

    def test_no_attempts(self, learner, quiz):
        summary = QuizAttemptTracker.summarize(learner, quiz)

        assert summary.best_score_percent == 0
        assert summary.total_attempts == 0
        assert summary.attempts_remaining == 3
        assert summary.passed is False
        assert summary.passing_score == 70

    def test_best_attempt_counts(self, learner, quiz):
        CompletedAttemptFactory(user=learner, quiz=quiz, score=2, max_score=10)
        CompletedAttemptFactory(user=learner, quiz=quiz, score=8, max_score=10)

        summary = QuizAttemptTracker.summarize(learner, quiz)

        assert summary.best_score_percent == 80
        assert summary.total_attempts == 2
        assert summary.attempts_remaining == 1
        assert summary.passed is True

    def test_below_passing_score(self, learner, quiz):
        CompletedAttemptFactory(user=learner, quiz=quiz, score=4, max_score=6)

        summary = QuizAttemptTracker.summarize(learner, quiz)

        assert summary.best_score_percent == 67
        assert summary.passed is False

    def test_zero_passing_score_passes_any_attempt(self, learner, quiz):
        CompletedAttemptFactory(user=learner, quiz=quiz, score=0, max_score=5)

        summary = QuizAttemptTracker.summarize(learner, quiz, passing_score=0)

        assert summary.passed is True
        assert summary.grading_disabled is True

    def test_attempts_remaining_never_negative(self, learner, quiz):
        for _ in range(quiz.max_attempts + 1):
            CompletedAttemptFactory(user=learner, quiz=quiz)

        assert QuizAttemptTracker.summarize(learner, quiz).attempts_remaining == 0

    def test_in_progress_attempts_are_ignored(self, learner, quiz):
        QuizAttemptFactory(user=learner, quiz=quiz)

        assert QuizAttemptTracker.summarize(learner, quiz).total_attempts == 0


@pytest.mark.django_db
class TestPassingScore:
    """Tests for passing_score_for."""

    def test_default(self, quiz):
        assert passing_score_for(quiz) == 70

    def test_content_override(self, quiz):
        content = QuizContentFactory(payload={"quiz_id": quiz.id, "passing_score": 50})

        assert passing_score_for(quiz, content) == 50

    def test_zero_override(self, quiz):
        content = QuizContentFactory(payload={"quiz_id": quiz.id, "passing_score": 0})

        assert passing_score_for(quiz, content) == 0

    def test_default_from_settings(self, quiz, settings):
        settings.LMS_DEFAULT_PASSING_SCORE = 60
        content = QuizContentFactory(payload={"quiz_id": quiz.id})

        assert passing_score_for(quiz, content) == 60


@pytest.mark.django_db
class TestQuizAnalyticsService:
    """Tests for QuizAnalyticsService."""

    def test_empty_quiz(self, weighted_quiz):
        quiz, _ = weighted_quiz

        stats = QuizAnalyticsService.get_quiz_statistics(quiz)

        assert stats["total_attempts"] == 0
        assert stats["pass_rate"] == 0
        assert len(stats["questions"]) == 3
        assert stats["questions"][0]["option_distribution"] == [0, 0, 0]

    def test_statistics(self, weighted_quiz):
        quiz, (q1, q2, q3) = weighted_quiz
        first, second = UserFactory(), UserFactory()
        CompletedAttemptFactory(
            user=first, quiz=quiz, score=6, max_score=6,
            answers={str(q1.id): 0, str(q2.id): 0, str(q3.id): 0},
        )
        CompletedAttemptFactory(
            user=second, quiz=quiz, score=1, max_score=6,
            answers={str(q1.id): 0, str(q2.id): 2},
        )

        stats = QuizAnalyticsService.get_quiz_statistics(quiz, passing_score=70)

        assert stats["total_attempts"] == 2
        assert stats["unique_users"] == 2
        assert stats["best_score"] == 100
        assert stats["worst_score"] == 17
        assert stats["pass_rate"] == 50
        assert stats["user_pass_rate"] == 50
        question_stats = {q["question_id"]: q for q in stats["questions"]}
        assert question_stats[q1.id]["success_rate"] == 100
        assert question_stats[q2.id]["option_distribution"] == [1, 0, 1]
        assert question_stats[q3.id]["total_answers"] == 1


@pytest.mark.django_db
class TestVisibleQuizIds:
    """Tests for QuizAttemptTracker.visible_quiz_ids."""

    def reference(self, quiz, section=None, **kwargs):
        section = section or CourseSectionFactory(course=quiz.course)
        return QuizContentFactory(section=section, payload={"quiz_id": quiz.id}, **kwargs)

    def test_enrolled_learner_sees_referenced_quiz(self, learner, quiz):
        self.reference(quiz)
        EnrollmentFactory(user=learner, course=quiz.course)

        assert QuizAttemptTracker.visible_quiz_ids(learner) == {quiz.id}

    def test_requires_enrollment(self, learner, quiz):
        self.reference(quiz)

        assert QuizAttemptTracker.visible_quiz_ids(learner) == set()

    def test_unpublished_content_is_excluded(self, learner, quiz):
        self.reference(quiz, is_published=False)
        EnrollmentFactory(user=learner, course=quiz.course)

        assert QuizAttemptTracker.visible_quiz_ids(learner) == set()

    def test_scheduled_section_becomes_visible(self, learner, quiz):
        section = ScheduledSectionFactory(course=quiz.course)
        self.reference(quiz, section=section)
        EnrollmentFactory(user=learner, course=quiz.course)

        assert QuizAttemptTracker.visible_quiz_ids(learner) == set()
        later = section.published_at + timedelta(minutes=1)
        assert QuizAttemptTracker.visible_quiz_ids(learner, now=later) == {quiz.id}
