import django_filters
from django.db.models import Q

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter predicate shared by listing, counting and search.

    ``search`` is a case-insensitive substring match OR-combined across
    name, description, SKU and category.
    """

    category = django_filters.CharFilter(field_name="category", lookup_expr="exact")
    search = django_filters.CharFilter(method="filter_search")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    in_stock = django_filters.BooleanFilter(field_name="in_stock")

    class Meta:
        model = Product
        fields = ["category", "search", "min_price", "max_price", "in_stock"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(sku__icontains=value)
            | Q(category__icontains=value)
        )
