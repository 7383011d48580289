from decimal import Decimal
import logging

from core_backend.money import quantize
from .models import ServiceArea

logger = logging.getLogger(__name__)


class DeliveryFeeService:
    """Delivery fee lookup by neighborhood. No geocoding, just the service-area table."""

    @staticmethod
    def lookup(restaurant, neighborhood=None, city=None) -> Decimal:
        """
        Return the delivery fee for a neighborhood.

        Matches active service areas case-insensitively on neighborhood (and on
        city when given). Falls back to the restaurant's default fee.
        """
        if neighborhood:
            areas = ServiceArea.objects.filter(
                restaurant=restaurant,
                is_active=True,
                neighborhood__iexact=neighborhood.strip(),
            )
            if city:
                areas = areas.filter(city__iexact=city.strip())

            area = areas.order_by('delivery_fee').first()
            if area is not None:
                return quantize(area.delivery_fee)

            logger.info(
                f"No service area for '{neighborhood}' at {restaurant.slug}; using default delivery fee"
            )

        return quantize(restaurant.delivery_fee)
