from django.contrib import admin
from .models import Production


@admin.register(Production)
class ProductionAdmin(admin.ModelAdmin):
    list_display = ['part', 'pallets', 'boxes', 'total_units', 'created_by', 'created_at']
    list_filter = ['part', 'created_at']
    search_fields = ['part__part_number', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['part', 'pallets', 'boxes', 'total_units', 'created_by', 'created_at']

    def has_add_permission(self, request):
        # Stock only moves through the production API so the ledger is applied
        return False
