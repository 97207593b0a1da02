"""
API URL configuration for assessments app.
"""

from django.urls import include, path

from rest_framework.routers import DefaultRouter

from .views import QuizViewSet

app_name = "assessments_api"

router = DefaultRouter()
router.register(r"quizzes", QuizViewSet, basename="quiz")

urlpatterns = [
    path("", include(router.urls)),
]
