"""
PDF documents for releases: packing slips, box labels, invoices and order
acknowledgements. Generators are pure functions of a frozen snapshot.
"""
from .box_labels import render_box_labels
from .invoice import render_invoice
from .order_acknowledgement import render_order_acknowledgement
from .packing_slip import render_packing_slip

__all__ = [
    'render_box_labels',
    'render_invoice',
    'render_order_acknowledgement',
    'render_packing_slip',
]
