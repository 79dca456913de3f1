"""
Letter-size packing slip.
"""
from reportlab.lib.pagesizes import letter
from .barcode import draw_barcode
from .pdf import (
    MARGIN, render, draw_address_block, draw_header_bar, draw_label_value,
    draw_table, draw_wrapped, format_date, format_quantity,
)

LINE_COLUMNS = [
    ('PART #', 90, 'left'),
    ('DESCRIPTION', 182, 'left'),
    ('UNITS/BOX', 60, 'right'),
    ('ORDERED', 60, 'right'),
    ('PREV SHIP', 50, 'right'),
    ('SHIPPED', 50, 'right'),
    ('B/O', 40, 'right'),
]


def render_packing_slip(data):
    """Render a PackingSlipData snapshot to PDF bytes."""
    def draw(pdf, width, height):
        y = draw_header_bar(pdf, 'PACKING SLIP', width, height - MARGIN)

        # Release barcode, top right
        draw_barcode(pdf, data.release_number, width - MARGIN - 200, y - 70, 200, 60)

        y -= 20
        draw_label_value(pdf, 'Release #:', data.release_number, MARGIN, y)
        draw_label_value(pdf, 'Ticket #:', data.ticket_number, MARGIN, y - 14)
        draw_label_value(pdf, 'Customer PO #:', data.customer_po_number, MARGIN, y - 28)
        draw_label_value(pdf, 'Date:', format_date(data.date), MARGIN, y - 42)

        y -= 80
        draw_address_block(pdf, 'SHIP FROM', data.ship_from, MARGIN, y)
        draw_address_block(pdf, 'SHIP TO', data.ship_to, width / 2, y)

        y -= 70
        draw_label_value(pdf, 'Ship Via:', data.ship_via, MARGIN, y)
        draw_label_value(pdf, 'Freight Terms:', data.freight_terms, width / 2, y)
        draw_label_value(pdf, 'Payment Terms:', data.payment_terms, MARGIN, y - 14)
        draw_label_value(pdf, 'Class:', data.shipping_class, width / 2, y - 14)
        draw_label_value(pdf, 'Cartons:', format_quantity(data.cartons), MARGIN, y - 28)
        draw_label_value(pdf, 'Weight:', f"{data.weight} lbs", width / 2, y - 28)

        y -= 50
        rows = [
            (
                item.part_number,
                item.description[:34],
                format_quantity(item.units_per_box),
                format_quantity(item.ordered),
                format_quantity(item.prev_ship),
                format_quantity(item.shipped),
                format_quantity(item.back_ordered),
            )
            for item in data.line_items
        ]
        y = draw_table(pdf, LINE_COLUMNS, rows, MARGIN, y)

        if data.notes:
            y -= 24
            pdf.setFont('Helvetica-Bold', 9)
            pdf.drawString(MARGIN, y, 'SPECIAL INSTRUCTIONS')
            draw_wrapped(pdf, data.notes, MARGIN, y - 13, width - 2 * MARGIN)

        pdf.setFont('Helvetica', 8)
        pdf.drawString(MARGIN, MARGIN, 'Received in good condition by: ______________________   Date: __________')

    return render(draw, pagesize=letter, title=f'Packing Slip {data.release_number}')
