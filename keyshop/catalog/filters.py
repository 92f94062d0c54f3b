import django_filters
from .models import Product
from .utils import STOCK_STATUSES, stock_status_quantity_filter


class ProductFilter(django_filters.FilterSet):
    """Product filter

    Query params:
    - search: case-insensitive match on product name, every word must appear
    - category: case-insensitive exact category label
    - stock_status: available, low_stock or out_of_stock (uses STOCK_STATUS_MODE)
    """
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    stock_status = django_filters.ChoiceFilter(
        method='filter_stock_status',
        choices=[(status, status) for status in STOCK_STATUSES],
        label='Stock Status',
    )

    class Meta:
        model = Product
        fields = ['search', 'category', 'stock_status']

    def filter_search(self, queryset, name, value):
        search_words = [w for w in value.split() if w]
        for word in search_words:
            queryset = queryset.filter(name__icontains=word)
        return queryset

    def filter_stock_status(self, queryset, name, value):
        if not value:
            return queryset
        lookups = stock_status_quantity_filter(value)
        if lookups is None:
            return queryset.none()
        return queryset.filter(**lookups)
