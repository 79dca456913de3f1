import django_filters
from django.db.models import Q
from .models import Release


class ReleaseFilter(django_filters.FilterSet):
    """Filters for the release history list"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=Release.STATUS_CHOICES)
    part = django_filters.NumberFilter(field_name='part_id', lookup_expr='exact')
    part_number = django_filters.CharFilter(field_name='part__part_number', lookup_expr='iexact')
    shipping_location = django_filters.NumberFilter(field_name='shipping_location_id', lookup_expr='exact')
    invoice_sent = django_filters.BooleanFilter(field_name='invoice_sent')
    ship_date_from = django_filters.DateFilter(field_name='ship_date', lookup_expr='date__gte')
    ship_date_to = django_filters.DateFilter(field_name='ship_date', lookup_expr='date__lte')
    created_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    created_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Release
        fields = ['search', 'status', 'part', 'part_number', 'shipping_location', 'invoice_sent',
                  'ship_date_from', 'ship_date_to', 'created_from', 'created_to']

    def filter_search(self, queryset, name, value):
        """Match release number, customer PO, ticket number or part number"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(release_number__icontains=value) |
            Q(customer_po_number__icontains=value) |
            Q(ticket_number__icontains=value) |
            Q(part__part_number__icontains=value)
        )
