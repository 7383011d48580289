from rest_framework import serializers
from orders.models import OrderItem
from core_backend.base import BaseModelSerializer


class OrderItemSerializer(BaseModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            'id',
            'product',
            'product_name',
            'quantity',
            'unit_price',
            'total_price',
            'special_instructions',
        ]
        read_only_fields = fields
        select_related_fields = ['product']


class OrderItemInputSerializer(serializers.Serializer):
    """One requested line of a new order. The price always comes from the catalog."""

    product = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    special_instructions = serializers.CharField(allow_blank=True, default='')
