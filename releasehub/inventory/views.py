import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from releasehub.catalog.models import Part
from releasehub.catalog.units import total_units
from releasehub.core.permissions import IsAdminRole
from releasehub.core.utils import create_audit_log
from .models import Production
from .serializers import ProductionSerializer, ProductionCreateSerializer
from . import ledger

logger = logging.getLogger('releasehub.inventory')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def production_list_create(request):
    """List production records (newest first) or record new inbound stock"""
    if request.method == 'GET':
        productions = Production.objects.select_related('part', 'created_by').order_by('-created_at')
        return Response(ProductionSerializer(productions, many=True).data)

    serializer = ProductionCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    part = get_object_or_404(Part, pk=data['part_id'])

    with transaction.atomic():
        production = Production.objects.create(
            part=part,
            pallets=data['pallets'],
            boxes=data['boxes'],
            total_units=total_units(data['pallets'], data['boxes'], part.boxes_per_pallet, part.units_per_box),
            created_by=request.user,
            notes=data['notes'],
        )
        ledger.apply_production(part, data['pallets'], data['boxes'])

    create_audit_log(
        request=request,
        action='production_create',
        model_name='Production',
        object_id=production.pk,
        object_reference=part.part_number,
        changes={'pallets': production.pallets, 'boxes': production.boxes, 'total_units': production.total_units},
    )
    logger.info(f"Production of {production.total_units} units for {part.part_number} recorded by {request.user.email}")
    return Response(ProductionSerializer(production).data, status=status.HTTP_201_CREATED)
