from decimal import Decimal
from django.conf import settings
from django.db import models
from django.utils import timezone
from releasehub.catalog.models import Part
from releasehub.catalog.units import total_boxes
from releasehub.locations.models import ShippingLocation


class Release(models.Model):
    """
    Outbound shipment order against a part's inventory.

    Quantities and the packing configuration are frozen at creation, so later
    changes to the part never alter total_units of an existing release.
    """
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_SHIPPED = 'SHIPPED'
    STATUS_CHOICES = [
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_SHIPPED, 'Shipped'),
    ]

    release_number = models.CharField(max_length=30, unique=True)
    part = models.ForeignKey(Part, on_delete=models.PROTECT, related_name='releases')
    shipping_location = models.ForeignKey(ShippingLocation, on_delete=models.PROTECT, related_name='releases')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='releases')

    pallets = models.PositiveIntegerField()
    boxes = models.PositiveIntegerField(default=0)
    boxes_per_pallet = models.PositiveIntegerField(help_text="Part packing at creation time")
    units_per_box = models.PositiveIntegerField(help_text="Part packing at creation time")
    total_units = models.PositiveIntegerField()

    customer_po_number = models.CharField(max_length=100)
    ticket_number = models.CharField(max_length=30, blank=True)
    batch_number = models.CharField(max_length=50, blank=True)
    ship_via = models.CharField(max_length=100, blank=True)
    freight_terms = models.CharField(max_length=100, blank=True)
    payment_terms = models.CharField(max_length=100, blank=True)
    manufacture_date = models.DateTimeField(default=timezone.now)
    ship_date = models.DateTimeField(null=True, blank=True)
    eta_delivery_date = models.DateTimeField(null=True, blank=True)
    cartons = models.PositiveIntegerField(default=0)
    weight = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    shipping_class = models.CharField(max_length=20, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True, help_text="Special shipping instructions")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_COMPLETED)

    packing_slip_url = models.CharField(max_length=500, blank=True)
    box_labels_url = models.CharField(max_length=500, blank=True)
    invoice_url = models.CharField(max_length=500, blank=True)
    documents_generated_at = models.DateTimeField(null=True, blank=True)

    customer_packing_slip_data = models.BinaryField(null=True, blank=True, editable=False)
    customer_packing_slip_name = models.CharField(max_length=255, blank=True)
    customer_packing_slip_uploaded_at = models.DateTimeField(null=True, blank=True)

    invoice_sent = models.BooleanField(default=False)
    invoice_sent_at = models.DateTimeField(null=True, blank=True)
    external_job_id = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.release_number

    @property
    def total_boxes(self):
        return total_boxes(self.pallets, self.boxes, self.boxes_per_pallet)

    @property
    def invoice_total(self):
        return Decimal(self.total_units) * self.part.price_per_unit

    @property
    def has_customer_packing_slip(self):
        return bool(self.customer_packing_slip_name)

    class Meta:
        db_table = 'releases'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='releases_status_idx'),
            models.Index(fields=['ship_date', 'invoice_sent'], name='releases_invoice_due_idx'),
        ]
