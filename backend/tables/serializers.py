from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import Table


class TableSerializer(BaseModelSerializer):
    is_occupied = serializers.BooleanField(read_only=True)

    class Meta:
        model = Table
        fields = [
            'id',
            'number',
            'name',
            'capacity',
            'is_active',
            'qr_code',
            'is_occupied',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'qr_code', 'is_occupied', 'created_at', 'updated_at']

    def validate_number(self, value):
        value = value.strip()
        restaurant = self.context.get('restaurant')
        if restaurant is not None:
            clash = Table.objects.filter(restaurant=restaurant, number=value)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError(f"Table {value} already exists.")
        return value


class PublicTableSerializer(BaseModelSerializer):
    """What the customer storefront learns from a scanned QR code."""

    restaurant_slug = serializers.CharField(source='restaurant.slug', read_only=True)
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)

    class Meta:
        model = Table
        fields = ['id', 'number', 'name', 'restaurant_slug', 'restaurant_name']
        read_only_fields = fields


class BillPreviewQuerySerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=False)


class CloseTableSerializer(serializers.Serializer):
    split_bill = serializers.BooleanField(default=False)
    # Values below 1 are coerced to 1 by the calculator
    number_of_people = serializers.IntegerField(default=1)
    close_by_user = serializers.BooleanField(default=False)
    selected_user = serializers.CharField(allow_blank=True, allow_null=True, default=None)
    tip_enabled = serializers.BooleanField(default=False)
    # Any finite percent is accepted; the calculator clamps it into range
    tip_percent = serializers.DecimalField(
        max_digits=None, decimal_places=None, allow_null=True, default=None
    )

    def validate(self, attrs):
        if attrs['close_by_user'] and not attrs.get('selected_user'):
            raise serializers.ValidationError({'selected_user': "Required when close_by_user is set."})
        return attrs
