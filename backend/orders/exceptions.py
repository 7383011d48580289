class OrderLifecycleError(Exception):
    """Base class for order lifecycle errors surfaced to staff clients."""

    code = "ORDER_ERROR"


class InvalidTransition(OrderLifecycleError):
    """The requested status change is not allowed from the order's current status."""

    code = "INVALID_TRANSITION"

    def __init__(self, order, new_status, reason):
        self.order = order
        self.new_status = new_status
        self.reason = reason
        super().__init__(
            f"Cannot transition order #{order.order_number} from {order.status} to {new_status}: {reason}"
        )


class ConflictError(OrderLifecycleError):
    """
    Lost the race on a conditional update: the order changed between read
    and write. Callers should refetch and retry, or tell staff it was
    already updated by someone else.
    """

    code = "CONFLICT"

    def __init__(self, order, expected_status, new_status):
        self.order = order
        self.expected_status = expected_status
        self.new_status = new_status
        super().__init__(
            f"Order #{order.order_number} is no longer {expected_status}; "
            f"it was updated concurrently before moving to {new_status}"
        )
