import django_filters
from django.db.models import Q

from .models import Order, OrderStatus


class OrderFilter(django_filters.FilterSet):
    """Order list filters"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    customer = django_filters.NumberFilter(field_name='customer_id', lookup_expr='exact')
    garment_type = django_filters.CharFilter(field_name='garment_type', lookup_expr='exact')
    due_from = django_filters.DateFilter(field_name='due_date', lookup_expr='gte')
    due_to = django_filters.DateFilter(field_name='due_date', lookup_expr='lte')

    class Meta:
        model = Order
        fields = ['search', 'status', 'customer', 'garment_type', 'due_from', 'due_to']

    def filter_search(self, queryset, name, value):
        """Match customer name, garment type or style description"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(customer_name__icontains=value)
            | Q(garment_type__icontains=value)
            | Q(style_description__icontains=value)
        )
