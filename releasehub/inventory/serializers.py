from rest_framework import serializers
from releasehub.catalog.serializers import PartSerializer
from releasehub.core.serializers import UserSummarySerializer
from .models import Production


class ProductionSerializer(serializers.ModelSerializer):
    part = PartSerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Production
        fields = ['id', 'part', 'pallets', 'boxes', 'total_units', 'created_by', 'notes', 'created_at']
        read_only_fields = fields


class ProductionCreateSerializer(serializers.Serializer):
    part_id = serializers.IntegerField()
    pallets = serializers.IntegerField(min_value=0)
    boxes = serializers.IntegerField(min_value=0, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
