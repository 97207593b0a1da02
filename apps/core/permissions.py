"""
DRF permissions shared by the API apps.
"""

from rest_framework import permissions


def is_course_admin(request) -> bool:
    """True when the request comes from a course administrator."""
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and user.is_course_admin)


class IsCourseAdmin(permissions.BasePermission):
    """Only allow course administrators."""

    message = "Solo los administradores de cursos pueden acceder a esta información."

    def has_permission(self, request, view):
        return is_course_admin(request)
