"""
ViewSets for certifications API.
"""

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.certifications.models import Certificate
from apps.certifications.services import CertificateService
from apps.core.permissions import is_course_admin

from .serializers import (
    CertificateSerializer,
    CertificateVerificationSerializer,
    CertificateVerifySerializer,
)


class CertificateViewSet(viewsets.ReadOnlyModelViewSet):
    """Certificates of the current user; course admins see every certificate."""

    serializer_class = CertificateSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = Certificate.objects.select_related("user", "course", "template")

        if not is_course_admin(self.request):
            queryset = queryset.filter(user=self.request.user)

        course_id = self.request.query_params.get("course")
        if course_id:
            queryset = queryset.filter(course_id=course_id)

        return queryset.order_by("-issued_at", "-created_at")

    @action(detail=False, methods=["post"], permission_classes=[permissions.AllowAny])
    def verify(self, request):
        """Verify a certificate by its number."""
        serializer = CertificateVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CertificateService.verify_certificate(
            serializer.validated_data["certificate_number"],
            ip_address=request.META.get("REMOTE_ADDR") or None,
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        if not result["valid"]:
            return Response(
                {"valid": False, "error": result["reason"]},
                status=status.HTTP_404_NOT_FOUND,
            )

        return Response(result)

    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        """Get certificate download URL."""
        certificate = self.get_object()

        if not certificate.certificate_file:
            return Response(
                {"error": "El archivo del certificado aún no está disponible"},
                status=status.HTTP_404_NOT_FOUND,
            )

        return Response(
            {"download_url": request.build_absolute_uri(certificate.certificate_file.url)}
        )

    @action(detail=True, methods=["get"])
    def verifications(self, request, pk=None):
        """Get verification history for a certificate."""
        if not is_course_admin(request):
            return Response(
                {"error": "Solo personal autorizado puede ver el historial"},
                status=status.HTTP_403_FORBIDDEN,
            )

        certificate = self.get_object()
        verifications = certificate.verifications.order_by("-verified_at")[:50]

        serializer = CertificateVerificationSerializer(verifications, many=True)
        return Response(serializer.data)
