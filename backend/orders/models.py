import uuid
from decimal import Decimal
from django.db import models
from django.utils.translation import gettext_lazy as _


class OrderQuerySet(models.QuerySet):
    def for_restaurant(self, restaurant):
        return self.filter(restaurant=restaurant)

    def active(self):
        return self.filter(status__in=Order.ACTIVE_STATUSES)

    def terminal(self):
        return self.filter(status__in=Order.TERMINAL_STATUSES)

    def with_items(self):
        return self.prefetch_related("items__product")


class Order(models.Model):
    """
    A customer order. Created once by OrderService and afterwards mutated only
    through OrderStateMachine. Orders are never deleted; history is the
    status field.
    """

    class OrderStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")
        OUT_FOR_DELIVERY = "out_for_delivery", _("Out for delivery")
        DELIVERED = "delivered", _("Delivered")
        CANCELLED = "cancelled", _("Cancelled")

    class OrderType(models.TextChoices):
        DELIVERY = "delivery", _("Delivery")
        TABLE = "table", _("Table")
        PICKUP = "pickup", _("Pickup")

    # Forward order of the lifecycle. CANCELLED sits outside the sequence.
    STATUS_SEQUENCE = (
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    )
    TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)
    # Statuses that still belong on a table's bill. A table order is never
    # out for delivery, so that status is not part of the ledger.
    ACTIVE_STATUSES = (
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    order_number = models.PositiveIntegerField(
        editable=False,
        help_text=_("Sequential per restaurant, never reused."),
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    order_type = models.CharField(
        max_length=20, choices=OrderType.choices, default=OrderType.DELIVERY
    )
    table = models.ForeignKey(
        "tables.Table",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Customer identity is free-form text, exactly as the customer typed it
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=32, blank=True)
    customer_address = models.TextField(blank=True)

    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    coupon_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)
    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(
        null=True, blank=True, help_text=_("Set only when the order is delivered.")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "order_number"], name="unique_order_number_per_restaurant"
            ),
        ]
        indexes = [
            models.Index(fields=["restaurant", "status"], name="order_restaurant_status_idx"),
            models.Index(fields=["table", "status"], name="order_table_status_idx"),
        ]

    def __str__(self):
        return f"Pedido #{self.order_number} ({self.get_status_display()})"


class OrderItem(models.Model):
    """
    A line on an order. `unit_price` is the product price captured when the
    item was ordered and is never re-read from the catalog.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product", on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(
        max_digits=10, decimal_places=2, help_text=_("Price snapshot at order time.")
    )
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    special_instructions = models.TextField(blank=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity}x {self.product.name}"
