import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for the product list using django-filter"""

    # Case-insensitive substring over name and category
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')

    class Meta:
        model = Product
        fields = ['search', 'category']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset

        search = value.strip()
        if not search:
            return queryset

        return queryset.filter(Q(name__icontains=search) | Q(category__icontains=search))
