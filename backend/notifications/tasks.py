from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_order_status_notification", ignore_result=True)
def send_order_status_notification(order_id, status):
    """
    Send the customer a WhatsApp message for an order status change.

    `status` is the status at dispatch time; the order may have moved on
    since, and the message describes the change that triggered it.
    """
    from orders.models import Order
    from .services import WhatsAppService

    try:
        order = Order.objects.select_related("restaurant").get(pk=order_id)
    except Order.DoesNotExist:
        logger.warning(f"Order {order_id} no longer exists; status notification dropped")
        return False

    try:
        return WhatsAppService().send_order_status_notification(
            restaurant=order.restaurant,
            customer_phone=order.customer_phone,
            order_number=order.order_number,
            new_status=status,
            customer_name=order.customer_name,
        )
    except Exception as e:
        logger.error(f"Status notification for order #{order.order_number} failed: {e}", exc_info=True)
        return False
