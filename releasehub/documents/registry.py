"""
Document types a release can produce, keyed by the names used in URLs.
"""
from .builders import (
    build_box_label_data, build_invoice_data,
    build_order_acknowledgement_data, build_packing_slip_data,
)
from .box_labels import render_box_labels
from .invoice import render_invoice
from .order_acknowledgement import render_order_acknowledgement
from .packing_slip import render_packing_slip

PACKING_SLIP = 'packing-slip'
BOX_LABELS = 'box-labels'
INVOICE = 'invoice'
ORDER_ACKNOWLEDGEMENT = 'order-acknowledgement'

DOCUMENT_TYPES = {
    PACKING_SLIP: (build_packing_slip_data, render_packing_slip),
    BOX_LABELS: (build_box_label_data, render_box_labels),
    INVOICE: (build_invoice_data, render_invoice),
    ORDER_ACKNOWLEDGEMENT: (build_order_acknowledgement_data, render_order_acknowledgement),
}

# Release field holding each stored document's URL
URL_FIELDS = {
    PACKING_SLIP: 'packing_slip_url',
    BOX_LABELS: 'box_labels_url',
    INVOICE: 'invoice_url',
}


def render_document(doc_type, release):
    build, render = DOCUMENT_TYPES[doc_type]
    return render(build(release))


def document_filename(doc_type, release):
    return f"{doc_type}-{release.release_number}.pdf"
