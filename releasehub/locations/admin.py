from django.contrib import admin
from .models import ShippingLocation


@admin.register(ShippingLocation)
class ShippingLocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'state', 'zip_code', 'is_active', 'created_at']
    list_filter = ['is_active', 'state']
    search_fields = ['name', 'city', 'address']
    ordering = ['name']
