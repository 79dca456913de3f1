import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from .models import ShippingLocation
from .serializers import ShippingLocationSerializer

logger = logging.getLogger('releasehub.locations')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def shipping_location_list(request):
    """List active shipping locations ordered by name"""
    locations = ShippingLocation.objects.filter(is_active=True).order_by('name')
    logger.debug(f"User {request.user.email} requested shipping locations ({locations.count()} active)")
    return Response(ShippingLocationSerializer(locations, many=True).data)
