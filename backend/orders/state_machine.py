r"""
Order status state machine.

    pending -> confirmed -> preparing -> ready -> out_for_delivery -> delivered
         \___________\___________\________\______________\___> cancelled

Orders only move forward. Staff may skip stages (pending -> ready is fine),
and any non-terminal order may be cancelled. delivered and cancelled are
terminal.

Every write is a conditional single-row update keyed on the status that was
read, so two terminals advancing the same order cannot both win.
"""

from django.conf import settings
from django.db import transaction
from django.utils import timezone
import logging

from .exceptions import ConflictError, InvalidTransition
from .models import Order
from .signals import order_status_changed

logger = logging.getLogger(__name__)

Status = Order.OrderStatus
Kind = Order.OrderType

ALL_STATUSES = frozenset(Status.values)

# Statuses an order of each kind may enter. Only consulted when
# ORDERS_ENFORCE_KIND_PATHS is on; otherwise every kind may take every path.
KIND_TRANSITION_POLICY = {
    Kind.DELIVERY.value: ALL_STATUSES,
    Kind.PICKUP.value: ALL_STATUSES - {Status.OUT_FOR_DELIVERY.value},
    Kind.TABLE.value: ALL_STATUSES - {Status.OUT_FOR_DELIVERY.value},
}

_RANK = {status.value: index for index, status in enumerate(Order.STATUS_SEQUENCE)}


def allowed_statuses(order_type):
    if not getattr(settings, "ORDERS_ENFORCE_KIND_PATHS", False):
        return ALL_STATUSES
    return KIND_TRANSITION_POLICY.get(str(order_type), ALL_STATUSES)


class OrderStateMachine:
    """Validates and applies status transitions for a single order."""

    @staticmethod
    def rejection_reason(current_status, new_status, order_type):
        """
        Return why current_status -> new_status is not allowed for an order of
        order_type, or None when the transition is valid.
        """
        current_status, new_status = str(current_status), str(new_status)

        if new_status not in ALL_STATUSES:
            return f"'{new_status}' is not a valid order status"

        if current_status in Order.TERMINAL_STATUSES:
            return f"order is already {current_status}"

        if new_status not in allowed_statuses(order_type):
            return f"{order_type} orders cannot be {new_status}"

        if new_status == Status.CANCELLED:
            return None

        if _RANK[new_status] <= _RANK[current_status]:
            return "status may only move forward"

        return None

    @classmethod
    def can_transition(cls, order, new_status):
        return cls.rejection_reason(order.status, new_status, order.order_type) is None

    @classmethod
    def allowed_next_statuses(cls, order):
        """Statuses the order may move to right now, in lifecycle order."""
        candidates = list(Order.STATUS_SEQUENCE) + [Status.CANCELLED]
        return [s for s in candidates if cls.can_transition(order, s)]

    @classmethod
    def transition(cls, order_id, new_status, notify=True):
        """
        Load the order and move it to new_status.

        Raises:
            Order.DoesNotExist: unknown order id
            InvalidTransition: the move is not allowed from the current status
            ConflictError: the order changed between read and write
        """
        order = Order.objects.select_related("restaurant", "table").get(pk=order_id)
        return cls.apply(order, new_status, notify=notify)

    @classmethod
    def apply(cls, order, new_status, notify=True):
        """
        Move an already-loaded order to new_status.

        The status on the instance is the optimistic expectation: if the row
        no longer has that status, nothing is written and ConflictError is
        raised. With notify=False the customer is not messaged; the caller
        takes responsibility for dispatching later.
        """
        reason = cls.rejection_reason(order.status, new_status, order.order_type)
        if reason is not None:
            raise InvalidTransition(order, new_status, reason)

        old_status = order.status
        now = timezone.now()
        changes = {"status": new_status, "updated_at": now}
        if new_status == Status.DELIVERED:
            changes["delivered_at"] = now

        with transaction.atomic():
            updated = Order.objects.filter(pk=order.pk, status=old_status).update(**changes)
            if updated == 0:
                logger.warning(
                    f"Conflict moving order #{order.order_number} {old_status} -> {new_status}"
                )
                raise ConflictError(order, old_status, new_status)

            for field, value in changes.items():
                setattr(order, field, value)

            responses = order_status_changed.send_robust(
                sender=Order,
                order=order,
                old_status=old_status,
                new_status=new_status,
                notify=notify,
            )

        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    f"order_status_changed receiver {receiver} failed for order "
                    f"#{order.order_number}: {response}"
                )

        logger.info(
            f"Order #{order.order_number} ({order.restaurant_id}) moved {old_status} -> {new_status}"
        )
        return order
