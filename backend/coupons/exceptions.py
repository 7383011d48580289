class InvalidCoupon(Exception):
    """The coupon cannot be applied to this order."""

    code = "INVALID_COUPON"
