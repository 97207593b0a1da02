"""
Admin configuration for certifications app.
"""

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .models import Certificate, CertificateTemplate, CertificateVerification
from .services import CertificateService


@admin.register(CertificateTemplate)
class CertificateTemplateAdmin(admin.ModelAdmin):
    """Admin configuration for CertificateTemplate model."""

    list_display = ["name", "is_active", "created_at"]
    list_filter = ["is_active", "created_at"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    """Admin configuration for Certificate model."""

    list_display = ["certificate_number", "user", "course", "issued_at", "is_rendered"]
    list_filter = ["issued_at"]
    search_fields = ["certificate_number", "user__email", "course__title"]
    readonly_fields = ["certificate_number", "issued_at", "created_at", "updated_at"]
    raw_id_fields = ["user"]
    autocomplete_fields = ["course", "template"]
    actions = ["rerender_documents"]

    fieldsets = [
        (None, {"fields": ["certificate_number", "user", "course", "template"]}),
        (_("Archivos"), {"fields": ["certificate_file", "verification_url"]}),
        (_("Fechas"), {"fields": ["issued_at", "created_at", "updated_at"]}),
        (_("Metadatos"), {"fields": ["metadata"], "classes": ["collapse"]}),
    ]

    @admin.display(boolean=True, description=_("Documento generado"))
    def is_rendered(self, obj):
        return obj.is_rendered

    @admin.action(description=_("Volver a generar el documento"))
    def rerender_documents(self, request, queryset):
        for certificate in queryset:
            CertificateService.queue_rendering(certificate)
        self.message_user(
            request,
            _("Se encoló la generación de %(count)d certificados.") % {"count": queryset.count()},
            messages.SUCCESS,
        )


@admin.register(CertificateVerification)
class CertificateVerificationAdmin(admin.ModelAdmin):
    """Admin configuration for CertificateVerification model."""

    list_display = ["certificate", "verified_at", "ip_address"]
    list_filter = ["verified_at"]
    readonly_fields = ["verified_at", "ip_address", "user_agent"]
