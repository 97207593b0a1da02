"""
API URL configuration for certifications.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CertificateViewSet

app_name = "certifications_api"

router = DefaultRouter()
router.register(r"certificates", CertificateViewSet, basename="certificate")

urlpatterns = [
    path("", include(router.urls)),
]
