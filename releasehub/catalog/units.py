"""
Pallet / box / unit arithmetic.

All quantities are integers. boxes_per_pallet always comes from the part
(or from the snapshot a release took of it), never from a fixed constant.
"""
import math

STATUS_GOOD = 'good'
STATUS_LOW = 'low'
STATUS_CRITICAL = 'critical'

GOOD_THRESHOLD = 30
LOW_THRESHOLD = 15


def total_boxes(pallets, boxes, boxes_per_pallet):
    return pallets * boxes_per_pallet + boxes


def total_units(pallets, boxes, boxes_per_pallet, units_per_box):
    return total_boxes(pallets, boxes, boxes_per_pallet) * units_per_box


def percent_of_annual(units, annual_order):
    """Stock on hand as a percentage of the annual order, unrounded."""
    if annual_order <= 0:
        return 0.0
    return units / annual_order * 100


def stock_status(units, annual_order):
    """
    Classify stock against the annual order.

    Returns ``(rounded_percent, status)``. The status is decided on the
    unrounded percentage: above 30 is good, above 15 is low, anything else
    (including a part with no annual order) is critical.
    """
    percent = percent_of_annual(units, annual_order)
    if annual_order > 0 and percent > GOOD_THRESHOLD:
        status = STATUS_GOOD
    elif annual_order > 0 and percent > LOW_THRESHOLD:
        status = STATUS_LOW
    else:
        status = STATUS_CRITICAL
    # Half-up rounding for display
    return math.floor(percent + 0.5), status
