import django_filters
from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """Filters for the restaurant's order list."""

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    table = django_filters.NumberFilter(field_name='table_id')
    customer_name = django_filters.CharFilter(field_name='customer_name', lookup_expr='exact')

    class Meta:
        model = Order
        fields = ['status', 'order_type', 'table', 'customer_name']


class OrderHistoryFilter(BaseFilterSet):
    """
    Filters for delivered and cancelled orders.

    date_from and date_to are whole days, both inclusive.
    """

    date_from = django_filters.DateFilter(method='filter_created_from')
    date_to = django_filters.DateFilter(method='filter_created_to')
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    table = django_filters.NumberFilter(field_name='table_id')

    class Meta:
        model = Order
        fields = ['date_from', 'date_to', 'order_type', 'table']
