from decimal import Decimal
from rest_framework import serializers


class ValidateCouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    order_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
