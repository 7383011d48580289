from django.http import JsonResponse
import logging

from .models import Restaurant

logger = logging.getLogger(__name__)


class RestaurantNotFoundError(Exception):
    """Raised when a restaurant slug cannot be resolved."""
    pass


class RestaurantMiddleware:
    """
    Resolves the current restaurant and attaches it to request.restaurant.

    Resolution precedence (highest to lowest):
    1. X-Restaurant header (staff dashboards and storefront)
    2. ?restaurant=<slug> query parameter
    3. None - endpoints that need a restaurant reject the request themselves

    Unknown slug -> 400, inactive restaurant -> 403.
    """

    HEADER = "HTTP_X_RESTAURANT"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Django admin operates across restaurants
        if request.path.startswith('/admin/'):
            request.restaurant = None
            return self.get_response(request)

        try:
            restaurant = self.get_restaurant_from_request(request)
        except RestaurantNotFoundError as e:
            return JsonResponse({'error': str(e), 'code': 'RESTAURANT_NOT_FOUND'}, status=400)

        if restaurant is not None and not restaurant.is_active:
            return JsonResponse({
                'error': 'Restaurant is inactive',
                'code': 'RESTAURANT_INACTIVE'
            }, status=403)

        request.restaurant = restaurant
        return self.get_response(request)

    def get_restaurant_from_request(self, request):
        slug = request.META.get(self.HEADER) or request.GET.get('restaurant')
        if not slug:
            return None

        slug = slug.strip()
        try:
            return Restaurant.objects.get(slug=slug)
        except Restaurant.DoesNotExist:
            logger.warning(f"Request for unknown restaurant slug '{slug}'")
            raise RestaurantNotFoundError(f"Restaurant '{slug}' not found")
