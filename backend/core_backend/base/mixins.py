from rest_framework import status
from rest_framework.exceptions import APIException


class RestaurantRequired(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Restaurant context is required. Send the X-Restaurant header."
    default_code = "RESTAURANT_REQUIRED"


class RestaurantScopedQuerysetMixin:
    """
    Automatically filters queryset by request.restaurant.

    RestaurantMiddleware attaches the resolved restaurant to the request.
    Models without a `restaurant` field are left untouched.

    Usage:
        class TableViewSet(RestaurantScopedQuerysetMixin, BaseViewSet):
            # Queryset is automatically restaurant-filtered
    """

    def get_restaurant(self):
        restaurant = getattr(self.request, 'restaurant', None)
        if restaurant is None:
            # FAIL LOUD: never serve another restaurant's orders
            raise RestaurantRequired()
        return restaurant

    def get_queryset(self):
        qs = super().get_queryset()

        if not any(f.name == 'restaurant' for f in qs.model._meta.get_fields()):
            return qs

        return qs.filter(restaurant=self.get_restaurant())
