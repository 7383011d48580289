from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from orders.exceptions import ConflictError, InvalidTransition
from orders.serializers import UpdateOrderStatusSerializer
from orders.state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """
        Move the order to a new status.

        Returns:
        - 200: the updated order
        - 400: the transition is not allowed
        - 409: someone else changed the order first
        """
        order = self.get_object()
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = OrderStateMachine.apply(order, serializer.validated_data["status"])
        except InvalidTransition as e:
            return Response(
                {"error": str(e), "code": e.code, "allowed": OrderStateMachine.allowed_next_statuses(order)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except ConflictError as e:
            return Response({"error": str(e), "code": e.code}, status=status.HTTP_409_CONFLICT)

        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["get"], url_path="allowed-statuses")
    def allowed_statuses(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        return Response({"status": order.status, "allowed": OrderStateMachine.allowed_next_statuses(order)})
