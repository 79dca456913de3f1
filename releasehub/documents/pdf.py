"""
Shared reportlab canvas helpers for the document generators.

Canvases are created with ``invariant=1`` so the PDF carries no creation
timestamp or random document id; identical input renders identical bytes.
"""
import io
from decimal import Decimal, ROUND_HALF_UP
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

MARGIN = 40
BRAND_COLOR = (0.102, 0.302, 0.42)


def render(draw, pagesize=letter, title=''):
    """Run ``draw(pdf, width, height)`` on a fresh canvas and return the PDF bytes."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=pagesize, invariant=1, pageCompression=0)
    pdf.setTitle(title)
    pdf.setAuthor('Enterprise Print Group')
    pdf.setCreator('releasehub')
    width, height = pagesize
    draw(pdf, width, height)
    pdf.save()
    return buffer.getvalue()


def draw_address_block(pdf, label, address, x, y, line_height=13):
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(x, y, label)
    pdf.setFont('Helvetica', 10)
    for line in address.lines():
        y -= line_height
        pdf.drawString(x, y, line)
    return y


def draw_wrapped(pdf, text, x, y, max_width, font='Helvetica', size=9, leading=11):
    pdf.setFont(font, size)
    for line in simpleSplit(text or '', font, size, max_width):
        pdf.drawString(x, y, line)
        y -= leading
    return y


def draw_label_value(pdf, label, value, x, y, label_width=95):
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(x, y, label)
    pdf.setFont('Helvetica', 9)
    pdf.drawString(x + label_width, y, str(value))


def draw_header_bar(pdf, title, width, y, height=28):
    pdf.setFillColorRGB(*BRAND_COLOR)
    pdf.rect(MARGIN, y - height, width - 2 * MARGIN, height, stroke=0, fill=1)
    pdf.setFillColorRGB(1, 1, 1)
    pdf.setFont('Helvetica-Bold', 16)
    pdf.drawString(MARGIN + 10, y - height + 9, title)
    pdf.setFillColorRGB(0, 0, 0)
    return y - height


def draw_table(pdf, columns, rows, x, y, row_height=18):
    """
    Draw a simple ruled table. ``columns`` is a list of ``(title, width, align)``
    with align one of 'left', 'right' or 'center'.
    """
    total_width = sum(column[1] for column in columns)
    pdf.setFillColorRGB(0.93, 0.94, 0.96)
    pdf.rect(x, y - row_height, total_width, row_height, stroke=1, fill=1)
    pdf.setFillColorRGB(0, 0, 0)
    pdf.setFont('Helvetica-Bold', 8)
    _draw_row(pdf, columns, [column[0] for column in columns], x, y - row_height + 6)
    y -= row_height
    pdf.setFont('Helvetica', 9)
    for row in rows:
        pdf.rect(x, y - row_height, total_width, row_height, stroke=1, fill=0)
        _draw_row(pdf, columns, row, x, y - row_height + 6)
        y -= row_height
    return y


def _draw_row(pdf, columns, values, x, baseline):
    cursor = x
    for (title, width, align), value in zip(columns, values):
        text = str(value)
        if align == 'right':
            pdf.drawRightString(cursor + width - 4, baseline, text)
        elif align == 'center':
            pdf.drawCentredString(cursor + width / 2, baseline, text)
        else:
            pdf.drawString(cursor + 4, baseline, text)
        cursor += width


def format_date(value):
    return value.strftime('%m/%d/%Y') if value else 'N/A'


def format_money(amount, places=2):
    quantum = Decimal(1).scaleb(-places)
    return f"${Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP):,}"


def format_quantity(value):
    return f"{value:,}"
