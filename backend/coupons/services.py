from decimal import Decimal
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
import logging

from core_backend.money import quantize, ZERO
from .exceptions import InvalidCoupon
from .models import Coupon, CouponUsage

logger = logging.getLogger(__name__)


class CouponService:
    """Coupon validation and redemption."""

    @staticmethod
    def calculate_discount(coupon: Coupon, order_value: Decimal) -> Decimal:
        """Percentage or fixed discount, never more than the order value."""
        order_value = quantize(order_value)
        if coupon.discount_type == Coupon.DiscountType.PERCENTAGE:
            discount = order_value * (coupon.discount_value / Decimal("100"))
        else:
            discount = coupon.discount_value
        return quantize(min(max(discount, ZERO), order_value))

    @staticmethod
    def validate(restaurant, code, order_value):
        """
        Check a coupon code against an order value.

        Returns:
            (coupon, discount)

        Raises:
            InvalidCoupon: unknown or inactive code, outside its validity
                window, no uses left, or order below the minimum value
        """
        if not code:
            raise InvalidCoupon("Coupon code is required")

        try:
            coupon = Coupon.objects.get(
                restaurant=restaurant, code=code.strip().upper(), is_active=True
            )
        except Coupon.DoesNotExist:
            raise InvalidCoupon("Coupon not found or inactive")

        if not coupon.is_valid_at(timezone.now()):
            raise InvalidCoupon("Coupon is outside its validity period")

        if coupon.is_exhausted:
            raise InvalidCoupon("Coupon has no uses left")

        order_value = quantize(order_value)
        if coupon.min_order_value is not None and order_value < coupon.min_order_value:
            raise InvalidCoupon(
                f"Minimum order value for this coupon is R$ {quantize(coupon.min_order_value)}"
            )

        return coupon, CouponService.calculate_discount(coupon, order_value)

    @staticmethod
    @transaction.atomic
    def redeem(coupon: Coupon, order, discount: Decimal) -> CouponUsage:
        """
        Record a coupon use for an order.

        The use counter is incremented with a conditional update so two
        orders cannot both take the last use.
        """
        updated = (
            Coupon.objects.filter(pk=coupon.pk)
            .filter(Q(max_uses__isnull=True) | Q(used_count__lt=F("max_uses")))
            .update(used_count=F("used_count") + 1)
        )
        if updated == 0:
            raise InvalidCoupon("Coupon has no uses left")

        usage = CouponUsage.objects.create(coupon=coupon, order=order, discount_applied=discount)
        logger.info(f"Coupon {coupon.code} redeemed on order #{order.order_number} for R$ {discount}")
        return usage
