from decimal import Decimal
from django.db import models
from .units import total_boxes, total_units


class Part(models.Model):
    """
    A printed part held in pallet/box inventory.

    current_pallets and current_boxes are written only by
    releasehub.inventory.ledger.
    """
    part_number = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255)
    units_per_box = models.PositiveIntegerField()
    boxes_per_pallet = models.PositiveIntegerField()
    price_per_unit = models.DecimalField(max_digits=10, decimal_places=4, default=Decimal('0'))
    cost_basis_per_unit = models.DecimalField(max_digits=10, decimal_places=4, null=True, blank=True)
    annual_order = models.PositiveIntegerField(default=0, help_text="Annual order benchmark in units")
    current_pallets = models.IntegerField(default=0)
    current_boxes = models.IntegerField(default=0)
    vendor_name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.part_number

    @property
    def total_boxes(self):
        return total_boxes(self.current_pallets, self.current_boxes, self.boxes_per_pallet)

    @property
    def total_units(self):
        return total_units(self.current_pallets, self.current_boxes, self.boxes_per_pallet, self.units_per_box)

    class Meta:
        db_table = 'parts'
        ordering = ['part_number']
