"""
Letter-size invoice.
"""
from reportlab.lib.pagesizes import letter
from .pdf import (
    MARGIN, render, draw_address_block, draw_header_bar, draw_label_value,
    draw_table, format_date, format_money, format_quantity,
)

LINE_COLUMNS = [
    ('PART #', 95, 'left'),
    ('DESCRIPTION', 202, 'left'),
    ('QUANTITY', 70, 'right'),
    ('UNIT PRICE', 75, 'right'),
    ('TOTAL', 90, 'right'),
]


def render_invoice(data):
    """Render an InvoiceData snapshot to PDF bytes."""
    def draw(pdf, width, height):
        y = draw_header_bar(pdf, 'INVOICE', width, height - MARGIN)

        y -= 20
        draw_label_value(pdf, 'Invoice #:', data.invoice_number, MARGIN, y)
        draw_label_value(pdf, 'Date:', format_date(data.date), MARGIN, y - 14)
        draw_label_value(pdf, 'Customer PO #:', data.customer_po_number, MARGIN, y - 28)
        draw_label_value(pdf, 'Terms:', data.payment_terms, MARGIN, y - 42)

        y -= 80
        draw_address_block(pdf, 'BILL FROM', data.bill_from, MARGIN, y)
        draw_address_block(pdf, 'BILL TO', data.bill_to, width / 2, y)

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

        totals_x = width - MARGIN - 165
        y -= 22
        for label, amount in (('Subtotal:', data.subtotal), ('Tax:', data.tax)):
            pdf.setFont('Helvetica', 10)
            pdf.drawString(totals_x, y, label)
            pdf.drawRightString(width - MARGIN - 4, y, format_money(amount))
            y -= 16
        pdf.setFont('Helvetica-Bold', 12)
        pdf.drawString(totals_x, y, 'TOTAL DUE:')
        pdf.drawRightString(width - MARGIN - 4, y, format_money(data.total))

        pdf.setFont('Helvetica', 8)
        pdf.drawString(MARGIN, MARGIN, f'Payment terms: {data.payment_terms}. Please reference invoice {data.invoice_number} with payment.')

    return render(draw, pagesize=letter, title=f'Invoice {data.invoice_number}')
