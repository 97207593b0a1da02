"""
Reusable validators for Academy LMS.

This module provides custom validators for model fields across the application.
"""

import re

from django.core.exceptions import ValidationError
from django.utils.deconstruct import deconstructible
from django.utils.translation import gettext_lazy as _


# =============================================================================
# Percentage Validators
# =============================================================================

def validate_percentage(value):
    """
    Validate that a value is between 0 and 100 (inclusive).

    Usage:
        passing_score = models.PositiveIntegerField(validators=[validate_percentage])
    """
    if value < 0 or value > 100:
        raise ValidationError(
            _("%(value)s no es un porcentaje válido. Debe estar entre 0 y 100."),
            params={"value": value},
            code="invalid_percentage",
        )


# =============================================================================
# JSON Schema Validators
# =============================================================================

@deconstructible
class JSONSchemaValidator:
    """
    Validator for JSON fields that checks against a schema definition.

    Supports basic type checking and required field validation.

    Usage:
        options_schema = {
            "type": "list",
            "items": {"type": "string"}
        }
        options = models.JSONField(validators=[JSONSchemaValidator(options_schema)])
    """

    def __init__(self, schema, message=None):
        self.schema = schema
        self.message = message or _("El formato JSON no es válido.")

    def __call__(self, value):
        try:
            self._validate(value, self.schema)
        except ValidationError:
            raise
        except Exception as e:
            raise ValidationError(
                self.message,
                code="invalid_json_schema",
            ) from e

    def _validate(self, value, schema):
        """Validate value against schema."""
        expected_type = schema.get("type")

        if expected_type == "list":
            if not isinstance(value, list):
                raise ValidationError(
                    _("Se esperaba una lista."),
                    code="invalid_type",
                )
            items_schema = schema.get("items")
            if items_schema:
                for i, item in enumerate(value):
                    try:
                        self._validate(item, items_schema)
                    except ValidationError as e:
                        raise ValidationError(
                            _("Error en el elemento %(index)s: %(error)s"),
                            params={"index": i, "error": str(e.message)},
                            code="invalid_item",
                        ) from e

        elif expected_type == "object":
            if not isinstance(value, dict):
                raise ValidationError(
                    _("Se esperaba un diccionario/objeto."),
                    code="invalid_type",
                )

            for field in schema.get("required", []):
                if field not in value:
                    raise ValidationError(
                        _("El campo '%(field)s' es requerido."),
                        params={"field": field},
                        code="missing_field",
                    )

            for key, prop_schema in schema.get("properties", {}).items():
                if key in value and value[key] is not None:
                    try:
                        self._validate(value[key], prop_schema)
                    except ValidationError as e:
                        raise ValidationError(
                            _("Error en '%(key)s': %(error)s"),
                            params={"key": key, "error": str(e.message)},
                            code="invalid_property",
                        ) from e

        elif expected_type == "string":
            if not isinstance(value, str):
                raise ValidationError(
                    _("Se esperaba un texto/string."),
                    code="invalid_type",
                )

        elif expected_type == "number":
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(
                    _("Se esperaba un número."),
                    code="invalid_type",
                )

    def __eq__(self, other):
        return (
            isinstance(other, JSONSchemaValidator)
            and self.schema == other.schema
            and self.message == other.message
        )


# Schema for question options (list of strings)
QUESTION_OPTIONS_SCHEMA = {
    "type": "list",
    "items": {"type": "string"},
}

# Schema for quiz content payloads
QUIZ_PAYLOAD_SCHEMA = {
    "type": "object",
    "required": ["quiz_id"],
    "properties": {
        "quiz_id": {"type": "number"},
        "passing_score": {"type": "number"},
    },
}

_FIELD_POSITION_SCHEMA = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {
        "x": {"type": "number"},
        "y": {"type": "number"},
        "font_size": {"type": "number"},
        "font_color": {"type": "string"},
        "font_family": {"type": "string"},
    },
}

# Schema for certificate template field coordinates
CERTIFICATE_FIELDS_SCHEMA = {
    "type": "object",
    "required": ["student_name"],
    "properties": {
        "student_name": _FIELD_POSITION_SCHEMA,
        "course_name": _FIELD_POSITION_SCHEMA,
        "completion_date": _FIELD_POSITION_SCHEMA,
        "certificate_number": _FIELD_POSITION_SCHEMA,
    },
}

validate_question_options = JSONSchemaValidator(
    QUESTION_OPTIONS_SCHEMA,
    message=_("options debe ser una lista de strings."),
)

validate_quiz_payload = JSONSchemaValidator(
    QUIZ_PAYLOAD_SCHEMA,
    message=_("El contenido de tipo quiz debe indicar quiz_id."),
)

validate_certificate_fields = JSONSchemaValidator(
    CERTIFICATE_FIELDS_SCHEMA,
    message=_("field_settings debe indicar la posición de cada campo."),
)


# =============================================================================
# Hex Color Validator
# =============================================================================

@deconstructible
class HexColorValidator:
    """
    Validator for hexadecimal color values.

    Usage:
        color = models.CharField(validators=[HexColorValidator()])
    """

    regex = re.compile(r'^#(?:[0-9a-fA-F]{3}){1,2}$')
    message = _("Ingrese un color hexadecimal válido (ej: #3B82F6).")
    code = "invalid_hex_color"

    def __call__(self, value):
        if not self.regex.match(value):
            raise ValidationError(self.message, code=self.code)

    def __eq__(self, other):
        return isinstance(other, HexColorValidator)


validate_hex_color = HexColorValidator()


# =============================================================================
# Certificate Number Validator
# =============================================================================

@deconstructible
class CertificateNumberValidator:
    """
    Validator for certificate numbers format.

    Expected format: PREFIX-YYYYMM-XXXXXXXX (e.g., ACAD-202406-1F2E3D4C)

    Usage:
        certificate_number = models.CharField(validators=[CertificateNumberValidator()])
    """

    regex = re.compile(r'^[A-Z0-9]+-\d{6}-[0-9A-F]{8}$')
    message = _("El número de certificado debe tener el formato PREFIJO-YYYYMM-XXXXXXXX")
    code = "invalid_certificate_number"

    def __call__(self, value):
        if not self.regex.match(value):
            raise ValidationError(self.message, code=self.code)

    def __eq__(self, other):
        return isinstance(other, CertificateNumberValidator)


validate_certificate_number = CertificateNumberValidator()
