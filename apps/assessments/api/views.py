"""
API views for assessments app.
"""

from django.shortcuts import get_object_or_404

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.assessments.models import Quiz
from apps.assessments.services import (
    QuizAnalyticsService,
    QuizAttemptTracker,
    passing_score_for,
)
from apps.core.permissions import IsCourseAdmin, is_course_admin
from apps.courses.models import SectionContent

from .serializers import (
    AnswerQuestionSerializer,
    QuizAttemptSerializer,
    QuizListSerializer,
    QuizSerializer,
    QuizSummarySerializer,
    SubmitAttemptSerializer,
)

# Answers and the current attempt id held between requests, keyed by quiz id
SESSION_ANSWERS_KEY = "quiz_answers"
SESSION_ATTEMPTS_KEY = "quiz_attempts"


class QuizViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Quizzes and the current user's attempts at them.

    Learners only reach quizzes referenced by visible content of courses
    they are enrolled in. Answers selected during an attempt are held in the
    user's session and only written when the attempt is submitted.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        if self.action == "list":
            return QuizListSerializer
        return QuizSerializer

    def get_queryset(self):
        queryset = Quiz.objects.select_related("course").prefetch_related("questions")
        if not is_course_admin(self.request):
            if not self.request.user.is_authenticated:
                return queryset.none()
            queryset = queryset.filter(
                id__in=QuizAttemptTracker.visible_quiz_ids(self.request.user)
            )
        course_id = self.request.query_params.get("course")
        if course_id:
            queryset = queryset.filter(course_id=course_id)
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["include_correct"] = is_course_admin(self.request)
        return context

    def _held_answers(self, request, quiz) -> dict:
        return dict(request.session.get(SESSION_ANSWERS_KEY, {}).get(str(quiz.id), {}))

    def _hold_answers(self, request, quiz, answers):
        held = request.session.get(SESSION_ANSWERS_KEY, {})
        held[str(quiz.id)] = answers
        request.session[SESSION_ANSWERS_KEY] = held
        request.session.modified = True

    def _drop_answers(self, request, quiz):
        held = request.session.get(SESSION_ANSWERS_KEY, {})
        if held.pop(str(quiz.id), None) is not None:
            request.session[SESSION_ANSWERS_KEY] = held
            request.session.modified = True

    def _held_attempt_id(self, request, quiz):
        return request.session.get(SESSION_ATTEMPTS_KEY, {}).get(str(quiz.id))

    def _hold_attempt_id(self, request, quiz, attempt_id):
        held = request.session.get(SESSION_ATTEMPTS_KEY, {})
        held[str(quiz.id)] = attempt_id
        request.session[SESSION_ATTEMPTS_KEY] = held
        request.session.modified = True

    def _passing_score(self, request, quiz):
        content_id = request.query_params.get("content")
        content = None
        if content_id:
            content = get_object_or_404(SectionContent, pk=content_id)
        return passing_score_for(quiz, content)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        """Start a new attempt, or resume the outstanding one."""
        quiz = self.get_object()
        session = QuizAttemptTracker.start_attempt(request.user, quiz)

        held = self._held_answers(request, quiz)
        held.update(session.answers)
        self._hold_answers(request, quiz, held)
        self._hold_attempt_id(request, quiz, session.attempt.id)

        return Response(
            {
                "attempt": QuizAttemptSerializer(session.attempt).data,
                "answers": held,
                "deadline": session.deadline,
                "seconds_remaining": session.seconds_remaining(),
                "resumed": session.resumed,
            },
            status=status.HTTP_200_OK if session.resumed else status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def answer(self, request, pk=None):
        """Hold the selected option for a question."""
        quiz = self.get_object()
        serializer = AnswerQuestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = QuizAttemptTracker.resume(request.user, quiz, self._held_answers(request, quiz))
        QuizAttemptTracker.answer_question(
            session,
            serializer.validated_data["question_id"],
            serializer.validated_data["option"],
        )
        self._hold_answers(request, quiz, session.answers)

        return Response(
            {
                "answers": session.answers,
                "seconds_remaining": session.seconds_remaining(),
            }
        )

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        """
        Submit the attempt with the held answers plus any sent in the body.

        Targets ``attempt_id`` from the body, else the attempt started in this
        session. Submitting an attempt that is already completed returns it
        unchanged.
        """
        quiz = self.get_object()
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        answers = self._held_answers(request, quiz)
        answers.update(serializer.validated_data.get("answers", {}))
        attempt_id = serializer.validated_data.get("attempt_id") or self._held_attempt_id(request, quiz)

        attempt = QuizAttemptTracker.submit_attempt(request.user, quiz, answers, attempt_id=attempt_id)
        self._drop_answers(request, quiz)
        self._hold_attempt_id(request, quiz, attempt.id)

        summary = QuizAttemptTracker.summarize(request.user, quiz, self._passing_score(request, quiz))
        return Response(
            {
                "attempt": QuizAttemptSerializer(attempt).data,
                "summary": QuizSummarySerializer(summary).data,
            }
        )

    @action(detail=True, methods=["get"])
    def summary(self, request, pk=None):
        """Summary of the current user's completed attempts."""
        quiz = self.get_object()
        summary = QuizAttemptTracker.summarize(request.user, quiz, self._passing_score(request, quiz))
        return Response(QuizSummarySerializer(summary).data)

    @action(detail=True, methods=["get"])
    def attempts(self, request, pk=None):
        """Completed attempts of the current user."""
        quiz = self.get_object()
        attempts = QuizAttemptTracker.completed_attempts(request.user, quiz)
        return Response(QuizAttemptSerializer(attempts, many=True).data)

    @action(detail=True, methods=["get"], permission_classes=[IsCourseAdmin])
    def analytics(self, request, pk=None):
        """Aggregate statistics (course admins only)."""
        quiz = self.get_object()
        stats = QuizAnalyticsService.get_quiz_statistics(quiz, self._passing_score(request, quiz))
        return Response(stats)
