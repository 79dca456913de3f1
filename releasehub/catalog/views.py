import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from releasehub.core.utils import create_audit_log
from .models import Part
from .serializers import PartSerializer, PartUpdateSerializer

logger = logging.getLogger('releasehub.catalog')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def part_list_update(request):
    """
    GET: all parts ordered by part number, with stock status.
    PUT: update a part's catalogue fields (admin only). Body: ``{"id": ..., <fields>}``.
    """
    if request.method == 'GET':
        parts = Part.objects.order_by('part_number')
        return Response(PartSerializer(parts, many=True).data)

    if not request.user.is_admin:
        logger.warning(f"User {request.user.email} attempted to update a part without admin role")
        raise PermissionDenied('Only administrators can update parts')

    part_id = request.data.get('id')
    if not part_id:
        raise ValidationError('Part id is required')
    part = get_object_or_404(Part, pk=part_id)

    serializer = PartUpdateSerializer(part, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    before = {field: str(getattr(part, field)) for field in serializer.validated_data}
    part = serializer.save()
    create_audit_log(
        request=request,
        action='part_update',
        model_name='Part',
        object_id=part.pk,
        object_reference=part.part_number,
        changes={
            field: {'old': before[field], 'new': str(value)}
            for field, value in serializer.validated_data.items()
        },
    )
    logger.info(f"Part {part.part_number} updated by {request.user.email}: {sorted(serializer.validated_data)}")
    return Response(PartSerializer(part).data)
