"""
Serializers for certifications API.
"""

from rest_framework import serializers

from apps.certifications.models import Certificate, CertificateVerification


class CertificateSerializer(serializers.ModelSerializer):
    """Serializer for Certificate model."""

    user_name = serializers.SerializerMethodField()
    course_title = serializers.CharField(source="course.title", read_only=True)
    is_rendered = serializers.BooleanField(read_only=True)

    class Meta:
        model = Certificate
        fields = [
            "id",
            "user",
            "user_name",
            "course",
            "course_title",
            "certificate_number",
            "certificate_file",
            "issued_at",
            "verification_url",
            "is_rendered",
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_full_name()


class CertificateVerifySerializer(serializers.Serializer):
    """Serializer for verifying a certificate."""

    certificate_number = serializers.CharField(max_length=50)


class CertificateVerificationSerializer(serializers.ModelSerializer):
    """Serializer for CertificateVerification model."""

    certificate_number = serializers.CharField(
        source="certificate.certificate_number", read_only=True
    )

    class Meta:
        model = CertificateVerification
        fields = [
            "id",
            "certificate",
            "certificate_number",
            "verified_at",
            "ip_address",
        ]
        read_only_fields = fields
