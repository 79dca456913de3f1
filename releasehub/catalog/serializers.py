from rest_framework import serializers
from .models import Part
from .units import stock_status


class PartSerializer(serializers.ModelSerializer):
    """Part with derived stock figures"""
    total_boxes = serializers.IntegerField(read_only=True)
    total_units = serializers.IntegerField(read_only=True)
    percent_of_annual = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()

    class Meta:
        model = Part
        fields = [
            'id', 'part_number', 'description', 'units_per_box', 'boxes_per_pallet',
            'price_per_unit', 'cost_basis_per_unit', 'annual_order', 'vendor_name',
            'current_pallets', 'current_boxes', 'total_boxes', 'total_units',
            'percent_of_annual', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_percent_of_annual(self, obj):
        return stock_status(obj.total_units, obj.annual_order)[0]

    def get_status(self, obj):
        return stock_status(obj.total_units, obj.annual_order)[1]


class PartUpdateSerializer(serializers.ModelSerializer):
    """
    Admin edits to a part's catalogue fields.

    Stock levels are not writable here; they only change through productions
    and releases.
    """
    class Meta:
        model = Part
        fields = [
            'description', 'units_per_box', 'boxes_per_pallet', 'price_per_unit',
            'cost_basis_per_unit', 'annual_order', 'vendor_name',
        ]
        extra_kwargs = {
            'units_per_box': {'min_value': 1},
            'boxes_per_pallet': {'min_value': 1},
        }

    def validate_price_per_unit(self, value):
        if value < 0:
            raise serializers.ValidationError('Price per unit cannot be negative')
        return value
