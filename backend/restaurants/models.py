import uuid
from decimal import Decimal
from django.db import models


class Restaurant(models.Model):
    """
    Root entity for restaurant scoping.
    Every table, order and coupon belongs to exactly one restaurant.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier sent by clients in the X-Restaurant header"
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive restaurants cannot receive orders"
    )

    # WhatsApp number the restaurant sends customer notifications from.
    # Blank disables status notifications for this restaurant.
    notification_whatsapp = models.CharField(max_length=32, blank=True)

    # Fallback fee when the customer's neighborhood is not in a service area
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    # Last order number handed out. Only ever incremented.
    last_order_number = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class ServiceArea(models.Model):
    """
    Delivery-fee lookup table row: one neighborhood a restaurant delivers to.
    """
    restaurant = models.ForeignKey(
        Restaurant, on_delete=models.CASCADE, related_name="service_areas"
    )
    neighborhood = models.CharField(max_length=120)
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['city', 'neighborhood']
        constraints = [
            models.UniqueConstraint(
                fields=['restaurant', 'neighborhood', 'city'],
                name='unique_service_area_per_restaurant',
            ),
        ]

    def __str__(self):
        return f"{self.neighborhood} - {self.city}/{self.state}"
