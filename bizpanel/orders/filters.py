import django_filters
from django.db.models import Q
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Filter for the order list using django-filter"""

    # 'all' (or no value) disables the status filter
    status = django_filters.CharFilter(method='filter_status', label='Status')
    # Case-insensitive substring over customer name/email and line item names
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Order
        fields = ['status', 'search']

    def filter_status(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(status=value)

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset

        search = value.strip()
        if not search:
            return queryset

        return queryset.filter(
            Q(customer_name__icontains=search) |
            Q(customer_email__icontains=search) |
            Q(items__name__icontains=search)
        ).distinct()
