from rest_framework import serializers
from orders.models import Order
from core_backend.base import BaseModelSerializer
from tables.models import Table

from .order_item_serializers import OrderItemSerializer, OrderItemInputSerializer


class OrderSerializer(BaseModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    table_number = serializers.CharField(source='table.number', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'status',
            'status_display',
            'order_type',
            'table',
            'table_number',
            'customer_name',
            'customer_phone',
            'customer_address',
            'subtotal',
            'delivery_fee',
            'coupon_discount',
            'total',
            'payment_method',
            'notes',
            'estimated_delivery_time',
            'delivered_at',
            'created_at',
            'updated_at',
            'items',
        ]
        read_only_fields = fields
        select_related_fields = ['table']
        prefetch_related_fields = ['items__product']


class OrderCreateSerializer(serializers.Serializer):
    """
    Input for a new order. Validation of business rules (product ownership,
    table kind, coupon) happens in OrderService.create_order.
    """

    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    customer_name = serializers.CharField(max_length=255)
    customer_phone = serializers.CharField(max_length=32, allow_blank=True, default='')
    customer_address = serializers.CharField(allow_blank=True, default='')
    table = serializers.PrimaryKeyRelatedField(
        queryset=Table.objects.all(), allow_null=True, default=None
    )
    neighborhood = serializers.CharField(allow_blank=True, allow_null=True, default=None)
    city = serializers.CharField(allow_blank=True, allow_null=True, default=None)
    coupon_code = serializers.CharField(allow_blank=True, allow_null=True, default=None)
    payment_method = serializers.CharField(max_length=32, allow_blank=True, default='')
    notes = serializers.CharField(allow_blank=True, default='')
    items = OrderItemInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("An order must contain at least one item.")
        return value

    def validate_table(self, value):
        restaurant = self.context.get('restaurant')
        if value is not None and restaurant is not None and value.restaurant_id != restaurant.pk:
            raise serializers.ValidationError("Table does not belong to this restaurant.")
        return value
