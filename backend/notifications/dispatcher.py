from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from decimal import Decimal
from uuid import UUID
import logging

logger = logging.getLogger(__name__)


def restaurant_orders_group(restaurant_id):
    return f"restaurant_{restaurant_id}_orders"


def convert_payload_to_str(data):
    """
    Recursively converts UUID and Decimal objects in a data structure to strings.
    This prepares the payload for default JSON serialization by the channels library.
    """
    if isinstance(data, dict):
        return {k: convert_payload_to_str(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [convert_payload_to_str(elem) for elem in data]
    elif isinstance(data, (UUID, Decimal)):
        return str(data)
    return data


def order_event_payload(order):
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "order_type": order.order_type,
        "table_id": order.table_id,
        "customer_name": order.customer_name,
        "total": order.total,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


class NotificationDispatcher:
    """
    Fire-and-forget fan-out of order events.

    Nothing here is awaited by the code that changed the order: work is
    deferred until the surrounding transaction commits, and every failure
    is logged and swallowed.
    """

    @staticmethod
    def broadcast(restaurant_id, event_type, data):
        """Send an event to every staff dashboard of the restaurant."""
        try:
            channel_layer = get_channel_layer()
            if channel_layer is None:
                logger.warning("No channel layer configured; broadcast skipped")
                return
            async_to_sync(channel_layer.group_send)(
                restaurant_orders_group(restaurant_id),
                {"type": event_type, "data": convert_payload_to_str(data)},
            )
        except Exception as e:
            logger.error(f"Failed to broadcast {event_type} for restaurant {restaurant_id}: {e}", exc_info=True)

    @staticmethod
    def enqueue_customer_notification(order_id, status):
        from .tasks import send_order_status_notification

        try:
            send_order_status_notification.delay(str(order_id), str(status))
        except Exception as e:
            logger.error(f"Failed to enqueue status notification for order {order_id}: {e}", exc_info=True)

    @classmethod
    def notify(cls, order):
        """
        Schedule the customer message and the dashboard event for the
        order's current status. Runs after commit; outside a transaction it
        runs immediately.
        """
        order_id = order.id
        status = str(order.status)
        restaurant_id = order.restaurant_id
        payload = order_event_payload(order)

        def dispatch():
            cls.enqueue_customer_notification(order_id, status)
            cls.broadcast(restaurant_id, "order_status_update", payload)

        transaction.on_commit(dispatch)

    @classmethod
    def notify_many(cls, orders):
        for order in orders:
            cls.notify(order)

    @classmethod
    def table_closed(cls, table, result):
        cls.broadcast(
            table.restaurant_id,
            "table_closed",
            {
                "table_id": table.pk,
                "table_number": table.number,
                "closed_order_ids": sorted(str(order_id) for order_id in result.closed_order_ids),
                "failed_order_ids": sorted(str(order_id) for order_id in result.failed_order_ids),
                "total": result.amounts.total if result.amounts is not None else None,
            },
        )
