import uuid
from django.db import models
from django.db.models import Exists, OuterRef
from django.utils.translation import gettext_lazy as _


def generate_qr_code():
    return uuid.uuid4().hex


class TableQuerySet(models.QuerySet):
    def for_restaurant(self, restaurant):
        return self.filter(restaurant=restaurant)

    def with_occupancy(self):
        """Annotate `occupied`: the table has at least one active order."""
        from orders.models import Order

        active_orders = Order.objects.filter(
            table=OuterRef("pk"), status__in=Order.ACTIVE_STATUSES
        )
        return self.annotate(occupied=Exists(active_orders))


class Table(models.Model):
    """
    A physical seating unit. Orders point at tables; tables never own orders.

    Whether a table is occupied is derived from its active orders and is
    never stored.
    """
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="tables",
    )
    number = models.CharField(max_length=20, help_text=_("Table number shown to staff and customers."))
    name = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveSmallIntegerField(default=4)
    is_active = models.BooleanField(default=True)
    qr_code = models.CharField(
        max_length=64,
        unique=True,
        default=generate_qr_code,
        editable=False,
        help_text=_("Token printed on the table's QR code for the storefront."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TableQuerySet.as_manager()

    class Meta:
        ordering = ["number"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "number"], name="unique_table_number_per_restaurant"
            ),
        ]

    def __str__(self):
        return f"Mesa {self.number}" + (f" ({self.name})" if self.name else "")

    @property
    def is_occupied(self):
        occupied = getattr(self, "occupied", None)
        if occupied is not None:
            return occupied
        from orders.models import Order

        return self.orders.filter(status__in=Order.ACTIVE_STATUSES).exists()
