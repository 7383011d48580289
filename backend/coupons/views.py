from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.mixins import RestaurantRequired
from .exceptions import InvalidCoupon
from .serializers import ValidateCouponSerializer
from .services import CouponService


class ValidateCouponView(APIView):
    """Preview the discount a coupon gives on an order value. Does not redeem it."""

    def post(self, request):
        restaurant = getattr(request, "restaurant", None)
        if restaurant is None:
            raise RestaurantRequired()

        serializer = ValidateCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            coupon, discount = CouponService.validate(
                restaurant,
                serializer.validated_data["code"],
                serializer.validated_data["order_value"],
            )
        except InvalidCoupon as e:
            return Response(
                {"valid": False, "error": str(e), "code": InvalidCoupon.code},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                "valid": True,
                "coupon": {
                    "id": coupon.id,
                    "code": coupon.code,
                    "description": coupon.description,
                    "discount_type": coupon.discount_type,
                    "discount_value": str(coupon.discount_value),
                },
                "discount": str(discount),
            }
        )
