from rest_framework import serializers
from releasehub.catalog.serializers import PartSerializer
from releasehub.core.serializers import UserSummarySerializer
from releasehub.locations.serializers import ShippingLocationSerializer
from .models import Release

DATE_INPUT_FORMATS = ['iso-8601', '%Y-%m-%d']


class ReleaseSerializer(serializers.ModelSerializer):
    part = PartSerializer(read_only=True)
    shipping_location = ShippingLocationSerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    total_boxes = serializers.IntegerField(read_only=True)
    invoice_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    has_customer_packing_slip = serializers.BooleanField(read_only=True)

    class Meta:
        model = Release
        fields = [
            'id', 'release_number', 'status', 'part', 'shipping_location', 'created_by',
            'pallets', 'boxes', 'boxes_per_pallet', 'units_per_box', 'total_boxes', 'total_units',
            'customer_po_number', 'ticket_number', 'batch_number',
            'ship_via', 'freight_terms', 'payment_terms', 'manufacture_date', 'ship_date',
            'eta_delivery_date', 'cartons', 'weight', 'shipping_class', 'tracking_number', 'notes',
            'packing_slip_url', 'box_labels_url', 'invoice_url', 'documents_generated_at',
            'has_customer_packing_slip', 'customer_packing_slip_name', 'customer_packing_slip_uploaded_at',
            'invoice_sent', 'invoice_sent_at', 'invoice_total', 'external_job_id',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ReleaseCreateSerializer(serializers.Serializer):
    part_id = serializers.IntegerField()
    shipping_location_id = serializers.IntegerField()
    customer_po_number = serializers.CharField(max_length=100)
    pallets = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    boxes = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    batch_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    ship_via = serializers.CharField(max_length=100, required=False, allow_blank=True)
    freight_terms = serializers.CharField(max_length=100, required=False, allow_blank=True)
    payment_terms = serializers.CharField(max_length=100, required=False, allow_blank=True)
    shipping_class = serializers.CharField(max_length=20, required=False, allow_blank=True)
    manufacture_date = serializers.DateTimeField(required=False, allow_null=True, input_formats=DATE_INPUT_FORMATS)
    ship_date = serializers.DateTimeField(required=False, allow_null=True, input_formats=DATE_INPUT_FORMATS)
    eta_delivery_date = serializers.DateTimeField(required=False, allow_null=True, input_formats=DATE_INPUT_FORMATS)
    cartons = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    weight = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ReleaseUpdateSerializer(serializers.Serializer):
    """Only these fields can change after creation; anything else in the body is ignored"""
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    ship_date = serializers.DateTimeField(required=False, allow_null=True, input_formats=DATE_INPUT_FORMATS)
    status = serializers.CharField(required=False)


class DocumentRequestSerializer(serializers.Serializer):
    document_type = serializers.ChoiceField(choices=['packing-slip', 'box-labels', 'all'], default='all')


class InvoiceTriggerSerializer(serializers.Serializer):
    release_id = serializers.IntegerField(required=False, allow_null=True)
