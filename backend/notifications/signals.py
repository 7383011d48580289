from django.dispatch import receiver
import logging

from orders.signals import order_status_changed
from tables.signals import table_closed

from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@receiver(order_status_changed)
def handle_order_status_changed(sender, order, old_status, new_status, notify=True, **kwargs):
    """
    Notify the customer and staff dashboards of a status change.

    Callers that move many orders at once (closing a table) pass
    notify=False and dispatch themselves when they are done.
    """
    if not notify:
        logger.debug(f"Notification for order #{order.order_number} deferred by caller")
        return
    NotificationDispatcher.notify(order)


@receiver(table_closed)
def handle_table_closed(sender, table, result, **kwargs):
    NotificationDispatcher.table_closed(table, result)
