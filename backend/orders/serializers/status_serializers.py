from rest_framework import serializers
from orders.models import Order


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Target status for an order. Whether the move is allowed is decided by
    OrderStateMachine, not here.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
