from rest_framework import serializers
from .models import ShippingLocation


class ShippingLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingLocation
        fields = ['id', 'name', 'address', 'city', 'state', 'zip_code', 'instructions', 'is_active']
