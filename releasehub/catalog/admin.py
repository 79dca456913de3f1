from django.contrib import admin
from .models import Part


@admin.register(Part)
class PartAdmin(admin.ModelAdmin):
    list_display = ['part_number', 'description', 'units_per_box', 'boxes_per_pallet',
                    'current_pallets', 'current_boxes', 'price_per_unit', 'vendor_name']
    list_filter = ['vendor_name']
    search_fields = ['part_number', 'description']
    ordering = ['part_number']
    # Stock levels change only through productions and releases
    readonly_fields = ['current_pallets', 'current_boxes', 'created_at', 'updated_at']
