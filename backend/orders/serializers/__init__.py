"""
Orders serializers package.
"""

from .order_item_serializers import OrderItemSerializer, OrderItemInputSerializer
from .order_serializers import OrderSerializer, OrderCreateSerializer
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    'OrderItemSerializer',
    'OrderItemInputSerializer',
    'OrderSerializer',
    'OrderCreateSerializer',
    'UpdateOrderStatusSerializer',
]
