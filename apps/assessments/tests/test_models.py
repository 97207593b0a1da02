"""
Tests for assessments models.
"""

from datetime import timedelta

from django.core.exceptions import ValidationError

import pytest

from apps.assessments.models import QuizAttempt

from .factories import (
    CompletedAttemptFactory,
    QuestionFactory,
    QuizAttemptFactory,
    QuizFactory,
)


@pytest.mark.django_db
class TestQuiz:
    """Tests for Quiz model."""

    def test_total_points(self):
        quiz = QuizFactory()
        QuestionFactory(quiz=quiz, points=2)
        QuestionFactory(quiz=quiz, points=3)

        assert quiz.total_points == 5

    def test_total_points_without_questions(self):
        assert QuizFactory().total_points == 0


@pytest.mark.django_db
class TestQuestion:
    """Tests for Question model."""

    def test_needs_two_options(self):
        question = QuestionFactory.build(quiz=QuizFactory(), options=["Única"], correct_option=0)

        with pytest.raises(ValidationError):
            question.clean()

    def test_correct_option_in_range(self):
        question = QuestionFactory.build(quiz=QuizFactory(), options=["A", "B"], correct_option=2)

        with pytest.raises(ValidationError):
            question.clean()

    def test_is_valid_option(self):
        question = QuestionFactory(options=["A", "B", "C"])

        assert question.is_valid_option(0)
        assert question.is_valid_option(2)
        assert not question.is_valid_option(3)
        assert not question.is_valid_option(-1)
        assert not question.is_valid_option(True)
        assert not question.is_valid_option("1")


@pytest.mark.django_db
class TestQuizAttempt:
    """Tests for QuizAttempt model."""

    def test_score_percent(self):
        attempt = CompletedAttemptFactory(score=4, max_score=6)
        assert round(attempt.score_percent, 2) == 66.67

    def test_score_percent_without_points(self):
        assert CompletedAttemptFactory(score=0, max_score=0).score_percent == 0.0

    def test_time_spent(self):
        attempt = CompletedAttemptFactory()
        attempt.completed_at = attempt.started_at + timedelta(minutes=3)

        assert attempt.time_spent_seconds == 180

    def test_time_spent_in_progress(self):
        assert QuizAttemptFactory().time_spent_seconds is None

    def test_managers(self):
        quiz = QuizFactory()
        done = CompletedAttemptFactory(quiz=quiz)
        pending = QuizAttemptFactory(quiz=quiz)

        assert list(QuizAttempt.objects.completed()) == [done]
        assert list(QuizAttempt.objects.in_progress()) == [pending]
        assert list(QuizAttempt.objects.for_user(done.user, quiz)) == [done]
