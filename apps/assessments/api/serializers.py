"""
Serializers for assessments API.
"""

from rest_framework import serializers

from apps.assessments.models import Question, Quiz, QuizAttempt


class QuestionSerializer(serializers.ModelSerializer):
    """Serializer for Question model (without the correct option)."""

    class Meta:
        model = Question
        fields = ["id", "text", "options", "points", "order"]


class QuestionWithCorrectSerializer(serializers.ModelSerializer):
    """Serializer for Question model including the correct option (admins only)."""

    class Meta:
        model = Question
        fields = ["id", "text", "options", "correct_option", "points", "order"]


class QuizListSerializer(serializers.ModelSerializer):
    """Simplified serializer for quiz lists."""

    class Meta:
        model = Quiz
        fields = ["id", "course", "title", "max_attempts", "time_limit"]


class QuizSerializer(serializers.ModelSerializer):
    """Serializer for Quiz model with its questions."""

    questions = serializers.SerializerMethodField()
    total_points = serializers.IntegerField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id",
            "course",
            "title",
            "description",
            "max_attempts",
            "time_limit",
            "total_points",
            "questions",
        ]

    def get_questions(self, obj):
        serializer_class = QuestionSerializer
        if self.context.get("include_correct"):
            serializer_class = QuestionWithCorrectSerializer
        return serializer_class(obj.questions.all(), many=True).data


class QuizAttemptSerializer(serializers.ModelSerializer):
    """Serializer for QuizAttempt model."""

    score_percent = serializers.FloatField(read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            "id",
            "quiz",
            "answers",
            "score",
            "max_score",
            "score_percent",
            "completed",
            "started_at",
            "completed_at",
        ]
        read_only_fields = fields


class AnswerQuestionSerializer(serializers.Serializer):
    """Serializer for holding an answer during an attempt."""

    question_id = serializers.IntegerField()
    option = serializers.IntegerField(min_value=0)


class SubmitAttemptSerializer(serializers.Serializer):
    """Serializer for submitting an attempt."""

    attempt_id = serializers.IntegerField(required=False, min_value=1)
    answers = serializers.DictField(
        child=serializers.IntegerField(min_value=0),
        required=False,
        default=dict,
    )


class QuizSummarySerializer(serializers.Serializer):
    """Serializer for a learner's quiz summary."""

    best_score_percent = serializers.IntegerField()
    total_attempts = serializers.IntegerField()
    attempts_remaining = serializers.IntegerField()
    passed = serializers.BooleanField()
    passing_score = serializers.IntegerField()
    grading_disabled = serializers.BooleanField()
