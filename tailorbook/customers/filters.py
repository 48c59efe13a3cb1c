import django_filters
from django.db.models import Q

from tailorbook.measurements.catalog import Gender
from .models import Customer


class CustomerFilter(django_filters.FilterSet):
    """Customer list filters: free-text search plus gender"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    gender = django_filters.ChoiceFilter(choices=Gender.choices)

    class Meta:
        model = Customer
        fields = ['search', 'gender']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(full_name__icontains=value) | Q(phone__icontains=value))
