"""
Business logic services for assessments.

Attempt lifecycle per (learner, quiz): an attempt row is created incomplete
with empty answers, answers are held by an ``AttemptSession`` without touching
the database, and ``finalize()`` scores them and flips the row to completed
exactly once.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.assessments.models import Question, Quiz, QuizAttempt
from apps.core.exceptions import (
    AssessmentError,
    AttemptAlreadySubmitted,
    AttemptsExhausted,
    InvalidAnswer,
    QuizzesDisabled,
    StoreUnavailable,
)
from apps.core.utils import percent, round_half_up
from apps.courses.models import Course, CourseSection, SectionContent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuizSummary:
    """Derived view of a learner's completed attempts at a quiz."""

    best_score_percent: int
    total_attempts: int
    attempts_remaining: int
    passed: bool
    passing_score: int

    @property
    def grading_disabled(self) -> bool:
        return self.passing_score == 0


def score_answers(questions, answers: dict) -> tuple:
    """
    Score held answers against a quiz's questions.

    Returns ``(score, max_score)``. Unanswered questions count as incorrect.
    Answer keys may be question ids or their string form.
    """
    score = 0
    max_score = 0
    for question in questions:
        max_score += question.points
        selected = answers.get(str(question.id), answers.get(question.id))
        if selected is not None and selected == question.correct_option:
            score += question.points
    return score, max_score


def passing_score_for(quiz: Quiz, content=None) -> int:
    """
    Passing score (%) for a quiz.

    A ``passing_score`` in the quiz content item's payload wins; otherwise
    ``settings.LMS_DEFAULT_PASSING_SCORE`` applies.
    """
    if content is not None and isinstance(content.payload, dict):
        override = content.payload.get("passing_score")
        if override is not None:
            return int(override)
    return settings.LMS_DEFAULT_PASSING_SCORE


def _check_quizzes_enabled():
    if not settings.LMS_QUIZZES_ENABLED:
        raise QuizzesDisabled()


class AttemptSession:
    """
    One learner's pass through a quiz, from start to finalization.

    Answers live on the session until ``finalize()``; the stored row is only
    written once, by a conditional update that requires it to still be
    incomplete. A session without a stored row (lost or never started)
    inserts a completed row on finalization instead.
    """

    def __init__(
        self,
        user,
        quiz: Quiz,
        attempt: Optional[QuizAttempt] = None,
        answers: dict = None,
        resumed: bool = False,
    ):
        self.user = user
        self.quiz = quiz
        self.attempt = attempt
        self.resumed = resumed
        self.answers = {}
        self.cancelled = False
        self._questions = None

        initial = answers if answers is not None else (attempt.answers if attempt else {})
        for question_id, option_index in (initial or {}).items():
            self.answers[str(question_id)] = option_index

    @property
    def questions(self) -> dict:
        if self._questions is None:
            self._questions = {str(q.id): q for q in self.quiz.questions.all()}
        return self._questions

    @property
    def is_finalized(self) -> bool:
        return self.attempt is not None and self.attempt.completed

    # Time limit

    @property
    def deadline(self):
        if not self.quiz.time_limit or self.attempt is None:
            return None
        return self.attempt.started_at + timedelta(minutes=self.quiz.time_limit)

    def seconds_remaining(self, now=None) -> Optional[int]:
        """Seconds left before auto-submit, None for untimed quizzes."""
        deadline = self.deadline
        if deadline is None:
            return None
        now = now or timezone.now()
        return max(0, int((deadline - now).total_seconds()))

    def is_expired(self, now=None) -> bool:
        remaining = self.seconds_remaining(now)
        return remaining is not None and remaining == 0

    def expire_if_due(self, now=None) -> Optional[QuizAttempt]:
        """
        Auto-submit with the held answers once the countdown reaches zero.

        Returns the completed attempt, or None while time remains or after
        the session was cancelled.
        """
        if self.cancelled or not self.is_expired(now):
            return None
        logger.info(
            f"Time limit reached for quiz {self.quiz.id}, auto-submitting for user {self.user.id}"
        )
        return self.finalize()

    def cancel(self):
        """Tear the session down without writing anything."""
        self.cancelled = True

    # Answers

    def select_answer(self, question_id, option_index: int):
        """Hold an answer locally. Last write per question wins."""
        if self.is_finalized:
            raise AttemptAlreadySubmitted()
        question = self.questions.get(str(question_id))
        if question is None:
            raise InvalidAnswer(
                "La pregunta no pertenece a esta evaluación.",
                details={"question_id": question_id},
            )
        if not question.is_valid_option(option_index):
            raise InvalidAnswer(
                "La opción seleccionada no existe.",
                details={"question_id": question_id, "option": option_index},
            )
        self.answers[str(question.id)] = option_index

    def finalize(self) -> QuizAttempt:
        """
        Score the held answers and complete the attempt.

        Safe to race with another finalization of the same row: only one
        transitions it, the other gets the stored completed record back.
        """
        if self.is_finalized:
            return self.attempt
        if self.cancelled:
            raise AssessmentError(
                "La sesión de evaluación fue cancelada.", code="attempt_cancelled"
            )

        score, max_score = score_answers(self.questions.values(), self.answers)
        now = timezone.now()

        try:
            if self.attempt is None:
                attempt = self._insert_completed(score, max_score, now)
            else:
                updated = QuizAttempt.objects.filter(pk=self.attempt.pk, completed=False).update(
                    answers=self.answers,
                    score=score,
                    max_score=max_score,
                    completed=True,
                    completed_at=now,
                )
                attempt = QuizAttempt.objects.get(pk=self.attempt.pk)
                if not updated:
                    logger.info(f"Attempt {attempt.id} was already submitted, returning stored result")
                    self.attempt = attempt
                    return attempt
        except DatabaseError as e:
            logger.error(f"Error submitting attempt for quiz {self.quiz.id}: {e}")
            raise StoreUnavailable(details={"partially_applied": False}) from e

        self.attempt = attempt
        logger.info(
            f"Attempt {attempt.id} submitted: user {self.user.id}, quiz {self.quiz.id}, "
            f"score {score}/{max_score}"
        )
        return attempt

    @transaction.atomic
    def _insert_completed(self, score, max_score, now) -> QuizAttempt:
        completed_count = QuizAttempt.objects.completed().filter(user=self.user, quiz=self.quiz).count()
        if completed_count >= self.quiz.max_attempts:
            raise AttemptsExhausted()
        return QuizAttempt.objects.create(
            user=self.user,
            quiz=self.quiz,
            answers=self.answers,
            score=score,
            max_score=max_score,
            completed=True,
            started_at=now,
            completed_at=now,
        )


class QuizAttemptTracker:
    """Service for quiz attempt operations."""

    @staticmethod
    def completed_attempts(user, quiz: Quiz):
        return QuizAttempt.objects.completed().filter(user=user, quiz=quiz)

    @staticmethod
    def visible_quiz_ids(user, now=None) -> set:
        """
        Ids of quizzes the learner can reach: those referenced by published
        quiz content in a visible section of a published course the learner
        is enrolled in.
        """
        contents = SectionContent.objects.filter(
            content_type=SectionContent.ContentType.QUIZ,
            is_published=True,
            section__in=CourseSection.objects.visible(now),
            section__course__status=Course.Status.PUBLISHED,
            section__course__enrollments__user=user,
        ).only("content_type", "payload")

        quiz_ids = set()
        for content in contents:
            quiz_id = content.quiz_id
            if isinstance(quiz_id, (int, float)) and not isinstance(quiz_id, bool):
                quiz_ids.add(int(quiz_id))
        return quiz_ids

    @staticmethod
    def outstanding_attempt(user, quiz: Quiz) -> Optional[QuizAttempt]:
        """Latest incomplete attempt, if any."""
        return (
            QuizAttempt.objects.in_progress()
            .filter(user=user, quiz=quiz)
            .order_by("-started_at", "-id")
            .first()
        )

    @staticmethod
    def start_attempt(user, quiz: Quiz) -> AttemptSession:
        """
        Start, or resume, an attempt.

        Raises AttemptsExhausted once every allowed attempt has been
        completed. An outstanding incomplete attempt is resumed rather than
        a second one being created.
        """
        _check_quizzes_enabled()

        completed_count = QuizAttemptTracker.completed_attempts(user, quiz).count()
        if completed_count >= quiz.max_attempts:
            raise AttemptsExhausted(
                f"Has alcanzado el máximo de {quiz.max_attempts} intentos",
                details={"max_attempts": quiz.max_attempts},
            )

        outstanding = QuizAttemptTracker.outstanding_attempt(user, quiz)
        if outstanding is not None:
            logger.info(f"Resuming attempt {outstanding.id} for user {user.id} on quiz {quiz.id}")
            return AttemptSession(user, quiz, attempt=outstanding, resumed=True)

        try:
            attempt = QuizAttempt.objects.create(
                user=user,
                quiz=quiz,
                answers={},
                completed=False,
                started_at=timezone.now(),
            )
        except DatabaseError as e:
            logger.error(f"Error starting attempt for quiz {quiz.id}: {e}")
            raise StoreUnavailable() from e

        logger.info(f"Attempt {attempt.id} started by user {user.id} on quiz {quiz.id}")
        return AttemptSession(user, quiz, attempt=attempt)

    @staticmethod
    def resume(user, quiz: Quiz, answers: dict = None) -> AttemptSession:
        """
        Rebuild a session for the outstanding attempt with answers held by the
        caller. Without an outstanding attempt the session has no row and
        finalization inserts one.
        """
        return AttemptSession(
            user,
            quiz,
            attempt=QuizAttemptTracker.outstanding_attempt(user, quiz),
            answers=answers if answers is not None else {},
        )

    @staticmethod
    def answer_question(session: AttemptSession, question_id, option_index: int) -> AttemptSession:
        _check_quizzes_enabled()
        session.select_answer(question_id, option_index)
        return session

    @staticmethod
    def submit_attempt(user, quiz: Quiz, answers: dict, attempt_id=None) -> QuizAttempt:
        """
        Submit answers for a quiz.

        With ``attempt_id`` that attempt is finalized, and one already
        completed is returned as stored with the answers ignored. Without it
        the outstanding incomplete attempt is finalized in place, or a
        completed attempt is inserted when none exists.
        """
        _check_quizzes_enabled()

        if attempt_id is not None:
            attempt = QuizAttempt.objects.filter(pk=attempt_id, user=user, quiz=quiz).first()
            if attempt is None:
                raise AssessmentError(
                    "El intento no existe.", code="attempt_not_found", details={"attempt_id": attempt_id}
                )
            if attempt.completed:
                logger.info(f"Attempt {attempt.id} was already submitted, returning stored result")
                return attempt
            session = AttemptSession(user, quiz, attempt=attempt, answers={})
        else:
            session = QuizAttemptTracker.resume(user, quiz)

        for question_id, option_index in (answers or {}).items():
            session.select_answer(question_id, option_index)
        return session.finalize()

    @staticmethod
    def summarize(user, quiz: Quiz, passing_score: int = None) -> QuizSummary:
        """
        Summarize the learner's completed attempts.

        A passing score of 0 disables grading: any completed attempt passes.
        """
        if passing_score is None:
            passing_score = settings.LMS_DEFAULT_PASSING_SCORE

        attempts = list(
            QuizAttemptTracker.completed_attempts(user, quiz).values_list("score", "max_score")
        )
        total = len(attempts)
        best = max((percent(score, max_score) for score, max_score in attempts), default=0.0)
        best_score_percent = round_half_up(best)

        if total == 0:
            passed = False
        elif passing_score == 0:
            passed = True
        else:
            passed = best_score_percent >= passing_score

        return QuizSummary(
            best_score_percent=best_score_percent,
            total_attempts=total,
            attempts_remaining=max(0, quiz.max_attempts - total),
            passed=passed,
            passing_score=passing_score,
        )


class QuizAnalyticsService:
    """Service for quiz statistics shown to course administrators."""

    @staticmethod
    def get_quiz_statistics(quiz: Quiz, passing_score: int = None) -> dict:
        """
        Aggregate statistics over every completed attempt of a quiz.
        """
        if passing_score is None:
            passing_score = settings.LMS_DEFAULT_PASSING_SCORE

        attempts = list(QuizAttempt.objects.completed().filter(quiz=quiz))
        questions = list(quiz.questions.all())

        if not attempts:
            return {
                "quiz_id": quiz.id,
                "total_attempts": 0,
                "unique_users": 0,
                "average_score": 0,
                "best_score": 0,
                "worst_score": 0,
                "pass_rate": 0,
                "user_pass_rate": 0,
                "average_time_seconds": 0,
                "questions": [
                    QuizAnalyticsService._question_statistics(question, [])
                    for question in questions
                ],
            }

        def attempt_passed(attempt):
            if passing_score == 0:
                return True
            return round_half_up(attempt.score_percent) >= passing_score

        scores = [attempt.score_percent for attempt in attempts]
        passed_count = sum(1 for attempt in attempts if attempt_passed(attempt))

        users_passed = set()
        user_ids = set()
        for attempt in attempts:
            user_ids.add(attempt.user_id)
            if attempt_passed(attempt):
                users_passed.add(attempt.user_id)

        times = [attempt.time_spent_seconds for attempt in attempts if attempt.time_spent_seconds is not None]

        return {
            "quiz_id": quiz.id,
            "total_attempts": len(attempts),
            "unique_users": len(user_ids),
            "average_score": round_half_up(sum(scores) / len(scores)),
            "best_score": round_half_up(max(scores)),
            "worst_score": round_half_up(min(scores)),
            "pass_rate": round_half_up(percent(passed_count, len(attempts))),
            "user_pass_rate": round_half_up(percent(len(users_passed), len(user_ids))),
            "average_time_seconds": round_half_up(sum(times) / len(times)) if times else 0,
            "questions": [
                QuizAnalyticsService._question_statistics(question, attempts)
                for question in questions
            ],
        }

    @staticmethod
    def _question_statistics(question: Question, attempts) -> dict:
        distribution = [0] * len(question.options)
        answered = 0
        correct = 0
        for attempt in attempts:
            selected = attempt.answers.get(str(question.id))
            if selected is None:
                continue
            answered += 1
            if isinstance(selected, int) and 0 <= selected < len(distribution):
                distribution[selected] += 1
            if selected == question.correct_option:
                correct += 1

        return {
            "question_id": question.id,
            "text": question.text,
            "total_answers": answered,
            "correct_answers": correct,
            "success_rate": round_half_up(percent(correct, answered)),
            "option_distribution": distribution,
        }

