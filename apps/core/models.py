"""
Core models for Academy LMS.

Provides base models and mixins used across the application.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class BaseModel(models.Model):
    """
    Abstract base model that provides common fields.

    - created_at: Timestamp when the record was created
    - updated_at: Timestamp when the record was last modified
    """

    created_at = models.DateTimeField(_("Fecha de creación"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Fecha de actualización"), auto_now=True)

    class Meta:
        abstract = True

