from django.dispatch import Signal

# Custom signals that other apps can listen to

# Sent after an order's status change has been written.
# kwargs: order, old_status, new_status
order_status_changed = Signal()
