from django.db import models
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    Catalog entry an order item points at.

    The catalog itself is managed elsewhere; orders only read `price` once,
    when the item is created, and keep that snapshot.
    """
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="products",
    )
    name = models.CharField(max_length=200, help_text=_("Name of the product."))
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("The current selling price of the product."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["restaurant", "is_active"], name="product_restaurant_active_idx"),
        ]

    def __str__(self):
        return self.name
