"""
Certificate document renderers.

The renderer used by the certificate task is configured with
``settings.CERTIFICATE_RENDERER`` (dotted path) and must implement
``render()`` returning the document bytes.
"""

import logging
from io import BytesIO

from django.conf import settings
from django.utils import formats
from django.utils.module_loading import import_string

import qrcode
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)


class CertificateRenderer:
    """Base class for certificate renderers."""

    def render(
        self,
        learner_name: str,
        course_title: str,
        issue_date,
        certificate_number: str,
        template=None,
        verification_url: str = "",
    ) -> bytes:
        raise NotImplementedError


class ReportLabCertificateRenderer(CertificateRenderer):
    """
    Landscape letter PDF drawn with ReportLab.

    With a template, the background image fills the page and each field is
    drawn where ``field_settings`` places it. Without one, a plain centred
    layout is used. A verification QR code goes in the bottom-right corner.
    """

    page_size = landscape(letter)
    default_font = "Helvetica"
    default_font_size = 18
    qr_size = 1.2 * inch

    def render(
        self,
        learner_name,
        course_title,
        issue_date,
        certificate_number,
        template=None,
        verification_url="",
    ) -> bytes:
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=self.page_size)
        width, height = self.page_size

        values = {
            "student_name": learner_name,
            "course_name": course_title,
            "completion_date": formats.date_format(issue_date, r"j \d\e F \d\e Y"),
            "certificate_number": certificate_number,
        }

        if template is not None and template.background_image:
            with template.background_image.open("rb") as image_file:
                c.drawImage(ImageReader(image_file), 0, 0, width=width, height=height)

        if template is not None and template.field_settings:
            self._draw_template_fields(c, template, values)
        else:
            self._draw_default_layout(c, width, height, values)

        if verification_url:
            self._draw_qr_code(c, width, verification_url)

        c.showPage()
        c.save()
        return buffer.getvalue()

    def _draw_template_fields(self, c, template, values):
        available_fonts = c.getAvailableFonts()
        for key, text in values.items():
            field = template.field(key)
            if field is None:
                continue
            font = field.get("font_family") or self.default_font
            if font not in available_fonts:
                logger.warning(f"Font {font} not available, using {self.default_font}")
                font = self.default_font
            c.setFont(font, field.get("font_size") or self.default_font_size)
            c.setFillColor(colors.HexColor(field.get("font_color") or "#000000"))
            c.drawCentredString(field["x"], field["y"], text)

    def _draw_default_layout(self, c, width, height, values):
        c.setFillColor(colors.black)

        c.setFont("Helvetica-Bold", 36)
        c.drawCentredString(width / 2, height - 2 * inch, "CERTIFICADO")

        c.setFont("Helvetica", 18)
        c.drawCentredString(width / 2, height - 3 * inch, f"Otorgado a: {values['student_name']}")
        c.drawCentredString(width / 2, height - 3.5 * inch, f"Curso: {values['course_name']}")

        c.setFont("Helvetica", 12)
        c.drawCentredString(width / 2, height - 4.5 * inch, f"No: {values['certificate_number']}")
        c.drawCentredString(width / 2, height - 5 * inch, f"Fecha: {values['completion_date']}")

    def _draw_qr_code(self, c, width, verification_url):
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(verification_url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        qr_buffer = BytesIO()
        img.save(qr_buffer, format="PNG")
        qr_buffer.seek(0)

        c.drawImage(
            ImageReader(qr_buffer),
            width - self.qr_size - 0.5 * inch,
            0.5 * inch,
            width=self.qr_size,
            height=self.qr_size,
        )


def get_certificate_renderer() -> CertificateRenderer:
    """Instantiate the renderer configured in ``settings.CERTIFICATE_RENDERER``."""
    return import_string(settings.CERTIFICATE_RENDERER)()
