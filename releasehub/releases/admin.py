from django.contrib import admin
from .models import Release


@admin.register(Release)
class ReleaseAdmin(admin.ModelAdmin):
    list_display = ['release_number', 'part', 'shipping_location', 'pallets', 'boxes', 'total_units',
                    'status', 'ship_date', 'invoice_sent', 'created_by', 'created_at']
    list_filter = ['status', 'invoice_sent', 'shipping_location', 'created_at']
    search_fields = ['release_number', 'customer_po_number', 'ticket_number', 'part__part_number', 'tracking_number']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    readonly_fields = [
        'release_number', 'ticket_number', 'part', 'pallets', 'boxes', 'boxes_per_pallet',
        'units_per_box', 'total_units', 'created_by', 'packing_slip_url', 'box_labels_url',
        'invoice_url', 'documents_generated_at', 'customer_packing_slip_name',
        'customer_packing_slip_uploaded_at', 'invoice_sent_at', 'external_job_id',
        'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        # Releases are created through the API so inventory is decremented
        return False

    def has_delete_permission(self, request, obj=None):
        # Deleting must restore inventory, which only the API does
        return False
