from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
import logging

from core_backend.base import BaseViewSet
from core_backend.base.mixins import RestaurantScopedQuerysetMixin
from orders.serializers import OrderSerializer
from orders.services import OrderService

from .exceptions import NothingToClose, PartialCloseFailure, TableLockBusy
from .models import Table
from .serializers import (
    BillPreviewQuerySerializer,
    CloseTableSerializer,
    PublicTableSerializer,
    TableSerializer,
)
from .services import BillingConsolidator, EmptyBill, TableClosingService

logger = logging.getLogger(__name__)


class TableViewSet(RestaurantScopedQuerysetMixin, BaseViewSet):
    """
    Tables of the current restaurant, plus billing and closing.

    DELETE deactivates: orders keep pointing at their table forever.
    """

    queryset = Table.objects.all()
    serializer_class = TableSerializer
    filterset_fields = ['is_active']
    ordering_fields = ['number', 'created_at']
    ordering = ['number']

    def get_queryset(self):
        return super().get_queryset().with_occupancy()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['restaurant'] = getattr(self.request, 'restaurant', None)
        return context

    def perform_create(self, serializer):
        serializer.save(restaurant=self.get_restaurant())

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"Table {instance.number} ({instance.restaurant_id}) deactivated")

    @action(detail=True, methods=['get'], url_path='bill-preview')
    def bill_preview(self, request: Request, pk=None) -> Response:
        """Live bill for the table. Nothing is changed."""
        table = self.get_object()
        params = BillPreviewQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        customer_name = params.validated_data.get('customer_name')

        try:
            bill = BillingConsolidator.consolidate(table, customer_name=customer_name)
        except EmptyBill:
            return Response({
                'table_id': table.pk,
                'customer_name': customer_name,
                'lines': [],
                'subtotal': '0.00',
                'item_count': 0,
                'orders_total': '0.00',
                'source_order_ids': [],
                'customers': [],
                'is_empty': True,
            })

        return Response({**bill.to_dict(), 'is_empty': False})

    @action(detail=True, methods=['post'], url_path='close')
    def close(self, request: Request, pk=None) -> Response:
        """
        Close the table (or one customer's orders) and mark them delivered.

        Returns:
        - 200: bill, final amounts and closed order ids
        - 400: nothing to close
        - 409: some orders could not be closed
        - 423: another close of this table is running
        """
        table = self.get_object()
        serializer = CloseTableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = TableClosingService.close_table(table, **serializer.validated_data)
        except TableLockBusy as e:
            return Response({'error': str(e), 'code': e.code}, status=status.HTTP_423_LOCKED)
        except NothingToClose as e:
            return Response({'error': str(e), 'code': e.code}, status=status.HTTP_400_BAD_REQUEST)
        except PartialCloseFailure as e:
            return Response(
                {'error': str(e), 'code': e.code, **e.result.to_dict()},
                status=status.HTTP_409_CONFLICT,
            )

        return Response(result.to_dict())

    @action(detail=True, methods=['get'], url_path='orders')
    def orders(self, request: Request, pk=None) -> Response:
        """Active orders on the table, oldest first."""
        table = self.get_object()
        orders = OrderService.get_active_orders_by_table(
            table, customer_name=request.query_params.get('customer_name') or None
        )
        return Response(OrderSerializer(orders, many=True).data)


class TableByQRCodeView(APIView):
    """Resolve a scanned QR code to its table. Used by the customer storefront."""

    permission_classes = [AllowAny]

    def get(self, request, qr_code):
        table = get_object_or_404(
            Table.objects.select_related('restaurant'),
            qr_code=qr_code,
            is_active=True,
            restaurant__is_active=True,
        )
        return Response(PublicTableSerializer(table).data)
