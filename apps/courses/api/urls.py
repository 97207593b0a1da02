"""
API URL configuration for courses.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers

from . import views

app_name = "courses_api"

router = DefaultRouter()
router.register(r"courses", views.CourseViewSet, basename="course")
router.register(r"contents", views.SectionContentViewSet, basename="content")

# Nested router for course -> sections
courses_router = routers.NestedDefaultRouter(router, r"courses", lookup="course")
courses_router.register(r"sections", views.CourseSectionViewSet, basename="course-section")

urlpatterns = [
    path("", include(router.urls)),
    path("", include(courses_router.urls)),
]
