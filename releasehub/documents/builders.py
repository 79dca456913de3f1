"""
Snapshots of a release in the shape each document generator expects.

Generators only ever see these frozen dataclasses, so the same snapshot
always renders the same bytes.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple
from django.conf import settings
from django.utils import timezone


@dataclass(frozen=True)
class Address:
    name: str
    address: str
    city: str
    state: str
    zip: str
    country: str = ''

    def lines(self):
        city_line = f"{self.city}, {self.state} {self.zip}"
        if self.country:
            city_line = f"{city_line} {self.country}"
        return [self.name, self.address, city_line]

    @classmethod
    def from_setting(cls, key):
        return cls(**settings.RELEASE_DEFAULTS[key])


@dataclass(frozen=True)
class PackingSlipLine:
    part_number: str
    description: str
    units_per_box: int
    ordered: int
    prev_ship: int
    shipped: int
    back_ordered: int


@dataclass(frozen=True)
class PackingSlipData:
    release_number: str
    ticket_number: str
    customer_po_number: str
    date: date
    ship_to: Address
    ship_from: Address
    line_items: Tuple[PackingSlipLine, ...]
    ship_via: str
    freight_terms: str
    payment_terms: str
    cartons: int
    weight: Decimal
    shipping_class: str
    notes: str = ''


@dataclass(frozen=True)
class BoxLabelData:
    part_number: str
    description: str
    units_per_box: int
    batch_number: str
    manufacture_date: date
    total_boxes: int
    ship_from: Address


@dataclass(frozen=True)
class InvoiceLine:
    part_number: str
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceData:
    invoice_number: str
    date: date
    customer_po_number: str
    bill_to: Address
    bill_from: Address
    line_items: Tuple[InvoiceLine, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_terms: str


@dataclass(frozen=True)
class OrderAcknowledgementData:
    order_number: str
    date: date
    customer_po_number: str
    ship_date: Optional[date]
    eta_delivery_date: Optional[date]
    ship_to: Address
    ship_from: Address
    line_items: Tuple[InvoiceLine, ...]
    subtotal: Decimal
    total: Decimal
    payment_terms: str
    notes: str = field(default='')


def _local_date(value):
    if value is None or not isinstance(value, datetime):
        return value
    if timezone.is_aware(value):
        return timezone.localtime(value).date()
    return value.date()


def ship_to_address(location):
    return Address(
        name=location.name,
        address=location.address,
        city=location.city,
        state=location.state,
        zip=location.zip_code,
    )


def invoice_line(release):
    unit_price = release.part.price_per_unit
    return InvoiceLine(
        part_number=release.part.part_number,
        description=release.part.description,
        quantity=release.total_units,
        unit_price=unit_price,
        total=Decimal(release.total_units) * unit_price,
    )


def build_packing_slip_data(release):
    return PackingSlipData(
        release_number=release.release_number,
        ticket_number=release.ticket_number or 'N/A',
        customer_po_number=release.customer_po_number,
        date=_local_date(release.created_at),
        ship_to=ship_to_address(release.shipping_location),
        ship_from=Address.from_setting('SHIP_FROM'),
        line_items=(
            PackingSlipLine(
                part_number=release.part.part_number,
                description=release.part.description,
                units_per_box=release.units_per_box,
                ordered=release.total_units,
                prev_ship=0,
                shipped=release.total_units,
                back_ordered=0,
            ),
        ),
        ship_via=release.ship_via,
        freight_terms=release.freight_terms,
        payment_terms=release.payment_terms,
        cartons=release.cartons or release.total_boxes,
        weight=release.weight,
        shipping_class=release.shipping_class,
        notes=release.notes,
    )


def build_box_label_data(release):
    return BoxLabelData(
        part_number=release.part.part_number,
        description=release.part.description,
        units_per_box=release.units_per_box,
        batch_number=release.batch_number or 'N/A',
        manufacture_date=_local_date(release.manufacture_date or release.created_at),
        total_boxes=release.total_boxes,
        ship_from=Address.from_setting('SHIP_FROM'),
    )


def build_invoice_data(release):
    line = invoice_line(release)
    return InvoiceData(
        invoice_number=release.release_number,
        date=_local_date(release.created_at),
        customer_po_number=release.customer_po_number,
        bill_to=Address.from_setting('BILL_TO'),
        bill_from=Address.from_setting('BILL_FROM'),
        line_items=(line,),
        subtotal=line.total,
        tax=Decimal('0'),
        total=line.total,
        payment_terms=release.payment_terms,
    )


def build_order_acknowledgement_data(release):
    line = invoice_line(release)
    return OrderAcknowledgementData(
        order_number=release.release_number,
        date=_local_date(release.created_at),
        customer_po_number=release.customer_po_number,
        ship_date=_local_date(release.ship_date),
        eta_delivery_date=_local_date(release.eta_delivery_date),
        ship_to=ship_to_address(release.shipping_location),
        ship_from=Address.from_setting('SHIP_FROM'),
        line_items=(line,),
        subtotal=line.total,
        total=line.total,
        payment_terms=release.payment_terms,
        notes=release.notes,
    )
