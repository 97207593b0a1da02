"""
User and authentication models for Academy LMS.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError(_("El email es obligatorio"))
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", User.Role.SUPERADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError(_("Superuser debe tener is_staff=True."))
        if extra_fields.get("is_superuser") is not True:
            raise ValueError(_("Superuser debe tener is_superuser=True."))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model for Academy LMS.

    Uses email as the username field. The role decides whether the user
    authors courses or only takes them.
    """

    class Role(models.TextChoices):
        USER = "USER", _("Estudiante")
        COURSE_ADMIN = "COURSE_ADMIN", _("Administrador de cursos")
        SUPERADMIN = "SUPERADMIN", _("Superadministrador")

    # Remove username field, use email instead
    username = None
    email = models.EmailField(_("Correo electrónico"), unique=True)

    role = models.CharField(
        _("Rol"),
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
    )

    # Metadata
    created_at = models.DateTimeField(_("Fecha de creación"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Fecha de actualización"), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    class Meta:
        db_table = "users"
        verbose_name = _("Usuario")
        verbose_name_plural = _("Usuarios")
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self):
        return self.first_name

    @property
    def is_course_admin(self):
        """Check if user can see unpublished content and quiz analytics."""
        return self.is_staff or self.role in (self.Role.COURSE_ADMIN, self.Role.SUPERADMIN)
