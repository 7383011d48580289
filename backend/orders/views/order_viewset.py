from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import ReadOnlyBaseViewSet
from core_backend.base.mixins import RestaurantScopedQuerysetMixin
from coupons.exceptions import InvalidCoupon
from orders.filters import OrderFilter, OrderHistoryFilter
from orders.models import Order
from orders.serializers import OrderSerializer, OrderCreateSerializer
from orders.services import OrderService

from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(RestaurantScopedQuerysetMixin, StatusActionsMixin, ReadOnlyBaseViewSet):
    """
    Orders of the current restaurant.

    Orders are created here and afterwards only change status; there is no
    update or delete.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ['created_at', 'order_number', 'total']
    ordering = ['-created_at']

    def get_queryset(self):
        return OrderSerializer.optimize_queryset(super().get_queryset())

    def create(self, request: Request) -> Response:
        restaurant = self.get_restaurant()
        serializer = OrderCreateSerializer(data=request.data, context={'restaurant': restaurant})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = OrderService.create_order(
                restaurant=restaurant,
                order_type=data['order_type'],
                items=data['items'],
                customer_name=data['customer_name'],
                customer_phone=data['customer_phone'],
                customer_address=data['customer_address'],
                table=data['table'],
                neighborhood=data['neighborhood'],
                city=data['city'],
                coupon_code=data['coupon_code'],
                payment_method=data['payment_method'],
                notes=data['notes'],
            )
        except InvalidCoupon as e:
            return Response({'error': str(e), 'code': e.code}, status=status.HTTP_400_BAD_REQUEST)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        order = OrderSerializer.optimize_queryset(Order.objects.all()).get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='history')
    def history(self, request: Request) -> Response:
        """Delivered and cancelled orders, newest first."""
        queryset = OrderService.get_order_history(self.get_restaurant())
        queryset = OrderHistoryFilter(request.query_params, queryset=queryset, request=request).qs

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(OrderSerializer(page, many=True).data)
        return Response(OrderSerializer(queryset, many=True).data)
