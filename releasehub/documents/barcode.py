"""
Code128 barcodes for PDF documents.
"""
import io
import logging
from functools import lru_cache
import barcode
from barcode.writer import ImageWriter
from reportlab.lib.utils import ImageReader

logger = logging.getLogger('releasehub.documents')

RENDER_OPTIONS = {
    'write_text': False,
    'module_width': 0.3,
    'module_height': 12.0,
    'quiet_zone': 2.0,
    'font_size': 0,
    'text_distance': 0,
    'background': 'white',
    'foreground': 'black',
    'dpi': 300,
}


def code128_image(value):
    """Render ``value`` as a Code128 PIL image."""
    code128 = barcode.get_barcode_class('code128')
    return code128(value, writer=ImageWriter()).render(dict(RENDER_OPTIONS))


@lru_cache(maxsize=64)
def code128_png(value):
    """PNG bytes for ``value``; box labels draw the same two barcodes on every page."""
    buffer = io.BytesIO()
    code128_image(value).save(buffer, format='PNG')
    return buffer.getvalue()


def draw_barcode(pdf, value, x, y, width, height, font_size=8):
    """
    Draw a barcode for ``value`` into the box at (x, y) on a reportlab canvas,
    with the human-readable value underneath.

    If the barcode cannot be rendered the value is drawn as plain text so the
    document is still produced.
    """
    text_height = font_size + 2
    try:
        image = ImageReader(io.BytesIO(code128_png(value)))
        pdf.drawImage(image, x, y + text_height, width=width, height=height - text_height)
    except Exception as e:
        logger.error(f"Barcode generation failed for '{value}': {str(e)}")
        pdf.setFont('Helvetica-Bold', font_size + 2)
        pdf.drawCentredString(x + width / 2, y + height / 2, f'BARCODE: {value}')
    pdf.setFont('Helvetica', font_size)
    pdf.drawCentredString(x + width / 2, y, value)
