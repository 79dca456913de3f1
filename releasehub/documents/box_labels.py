"""
4x6 inch box labels, one page per box.

Each label is a 2x3 grid: ship-from address and box quantity on top, part
and batch barcodes in the middle, description and manufacture date below.
"""
from reportlab.lib.units import inch
from .barcode import draw_barcode
from .pdf import render, draw_wrapped, format_date, format_quantity

LABEL_SIZE = (4 * inch, 6 * inch)
LABEL_MARGIN = 0.1 * inch


def render_box_labels(data):
    """Render a BoxLabelData snapshot to PDF bytes, one page per box."""
    def draw(pdf, width, height):
        for box_number in range(1, data.total_boxes + 1):
            _draw_label(pdf, data, box_number, width, height)
            pdf.showPage()

    return render(draw, pagesize=LABEL_SIZE, title=f'Box Labels {data.part_number}')


def _draw_label(pdf, data, box_number, width, height):
    cell_width = (width - 2 * LABEL_MARGIN) / 2
    cell_height = (height - 2 * LABEL_MARGIN) / 3
    left = LABEL_MARGIN
    right = LABEL_MARGIN + cell_width
    pad = 0.1 * inch

    pdf.setLineWidth(1.8)
    pdf.rect(LABEL_MARGIN, LABEL_MARGIN, width - 2 * LABEL_MARGIN, height - 2 * LABEL_MARGIN)
    pdf.line(width / 2, LABEL_MARGIN, width / 2, height - LABEL_MARGIN)
    pdf.line(LABEL_MARGIN, LABEL_MARGIN + cell_height, width - LABEL_MARGIN, LABEL_MARGIN + cell_height)
    pdf.line(LABEL_MARGIN, LABEL_MARGIN + 2 * cell_height, width - LABEL_MARGIN, LABEL_MARGIN + 2 * cell_height)

    top = height - LABEL_MARGIN
    middle = LABEL_MARGIN + 2 * cell_height
    bottom = LABEL_MARGIN + cell_height

    # Top left: ship-from address
    pdf.setFont('Helvetica', 9)
    y = top - pad - 6
    for line in data.ship_from.lines()[:2]:
        pdf.drawString(left + pad, y, line)
        y -= 12
    address = data.ship_from
    pdf.drawString(left + pad, y, f"{address.city}, {address.state} {address.zip}")

    # Top right: box quantity
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(right + pad, top - pad - 6, 'Box Quantity')
    pdf.setFont('Helvetica-Bold', 28)
    pdf.drawCentredString(right + cell_width / 2, top - cell_height / 2 - 10, format_quantity(data.units_per_box))
    pdf.setFont('Helvetica', 7)
    pdf.drawRightString(width - LABEL_MARGIN - pad, top - cell_height + pad, f"Box {box_number} of {data.total_boxes}")

    # Middle left: part number barcode
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(left + pad, middle - pad - 6, 'Part #')
    draw_barcode(pdf, data.part_number, left + pad, bottom + pad, cell_width - 2 * pad, cell_height - 0.45 * inch)

    # Middle right: batch number barcode
    pdf.drawString(right + pad, middle - pad - 6, 'Batch #')
    draw_barcode(pdf, data.batch_number, right + pad, bottom + pad, cell_width - 2 * pad, cell_height - 0.45 * inch)

    # Bottom left: description
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(left + pad, bottom - pad - 6, 'Description')
    draw_wrapped(pdf, data.description, left + pad, bottom - pad - 22, cell_width - 2 * pad, size=8, leading=10)

    # Bottom right: manufacture date
    pdf.setFont('Helvetica-Bold', 9)
    pdf.drawString(right + pad, bottom - pad - 6, 'Date of Manufacture')
    pdf.setFont('Helvetica-Bold', 14)
    pdf.drawCentredString(right + cell_width / 2, LABEL_MARGIN + cell_height / 2 - 6, format_date(data.manufacture_date))
