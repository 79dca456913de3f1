"""
Letter-size order acknowledgement confirming a release's quantity, price and dates.
"""
from reportlab.lib.pagesizes import letter
from .pdf import (
    MARGIN, render, draw_address_block, draw_header_bar, draw_label_value,
    draw_table, draw_wrapped, format_date, format_money, format_quantity,
)

LINE_COLUMNS = [
    ('PART #', 95, 'left'),
    ('DESCRIPTION', 202, 'left'),
    ('QUANTITY', 70, 'right'),
    ('UNIT PRICE', 75, 'right'),
    ('TOTAL', 90, 'right'),
]


def render_order_acknowledgement(data):
    """Render an OrderAcknowledgementData snapshot to PDF bytes."""
    def draw(pdf, width, height):
        y = draw_header_bar(pdf, 'ORDER ACKNOWLEDGEMENT', width, height - MARGIN)

        y -= 20
        draw_label_value(pdf, 'Order #:', data.order_number, MARGIN, y)
        draw_label_value(pdf, 'Order Date:', format_date(data.date), MARGIN, y - 14)
        draw_label_value(pdf, 'Customer PO #:', data.customer_po_number, MARGIN, y - 28)
        draw_label_value(pdf, 'Ship Date:', format_date(data.ship_date), width / 2, y)
        draw_label_value(pdf, 'ETA Delivery:', format_date(data.eta_delivery_date), width / 2, y - 14)
        draw_label_value(pdf, 'Terms:', data.payment_terms, width / 2, y - 28)

        y -= 66
        draw_address_block(pdf, 'SHIP FROM', data.ship_from, MARGIN, y)
        draw_address_block(pdf, 'SHIP TO', data.ship_to, width / 2, y)

        y -= 70
        rows = [
            (
                item.part_number,
                item.description[:38],
                format_quantity(item.quantity),
                format_money(item.unit_price, places=4),
                format_money(item.total),
            )
            for item in data.line_items
        ]
        y = draw_table(pdf, LINE_COLUMNS, rows, MARGIN, y)

        y -= 22
        pdf.setFont('Helvetica-Bold', 12)
        pdf.drawString(width - MARGIN - 165, y, 'ORDER TOTAL:')
        pdf.drawRightString(width - MARGIN - 4, y, format_money(data.total))

        if data.notes:
            y -= 30
            pdf.setFont('Helvetica-Bold', 9)
            pdf.drawString(MARGIN, y, 'SPECIAL INSTRUCTIONS')
            draw_wrapped(pdf, data.notes, MARGIN, y - 13, width - 2 * MARGIN)

        pdf.setFont('Helvetica', 8)
        pdf.drawString(MARGIN, MARGIN, 'Thank you for your order. Please contact us within 48 hours if any details are incorrect.')

    return render(draw, pagesize=letter, title=f'Order Acknowledgement {data.order_number}')
