from django.db import transaction
from django.db.models import F
import logging

from core_backend.money import quantize, ZERO
from coupons.services import CouponService
from orders.models import Order, OrderItem
from orders.state_machine import OrderStateMachine
from products.models import Product
from restaurants.models import Restaurant
from restaurants.services import DeliveryFeeService

logger = logging.getLogger(__name__)


class OrderService:
    """Order persistence: creation, ledger queries and history."""

    @staticmethod
    def _next_order_number(restaurant) -> int:
        """
        Allocate the next order number for a restaurant.

        Must run inside a transaction. The counter row is incremented in the
        database, so concurrent creations never share a number, and numbers of
        cancelled orders are never handed out again.
        """
        Restaurant.objects.filter(pk=restaurant.pk).update(
            last_order_number=F('last_order_number') + 1
        )
        number = Restaurant.objects.values_list('last_order_number', flat=True).get(pk=restaurant.pk)
        restaurant.last_order_number = number
        return number

    @staticmethod
    def _resolve_items(restaurant, items):
        """
        Validate requested items and snapshot their prices.

        Args:
            items: iterable of dicts with product (id or Product), quantity and
                optional special_instructions

        Returns:
            list of (product, quantity, unit_price, special_instructions)
        """
        if not items:
            raise ValueError("An order must contain at least one item")

        resolved = []
        for item in items:
            product = item.get('product') or item.get('product_id')
            product_id = getattr(product, 'pk', product)
            quantity = int(item.get('quantity', 1))

            if quantity < 1:
                raise ValueError("Item quantity must be at least 1")

            try:
                product = Product.objects.get(pk=product_id, restaurant=restaurant)
            except (Product.DoesNotExist, ValueError, TypeError):
                raise ValueError(f"Product {product_id} not found for this restaurant")

            if not product.is_active:
                raise ValueError(f"Product '{product.name}' is not available")

            resolved.append(
                (product, quantity, quantize(product.price), item.get('special_instructions', '') or '')
            )
        return resolved

    @staticmethod
    @transaction.atomic
    def create_order(
        restaurant,
        order_type,
        items,
        customer_name,
        customer_phone="",
        customer_address="",
        table=None,
        neighborhood=None,
        city=None,
        coupon_code=None,
        payment_method="",
        notes="",
    ) -> Order:
        """
        Create an order with its items.

        Raises:
            ValueError: empty or invalid items, bad table reference, inactive
                restaurant or missing customer name
            InvalidCoupon: coupon_code given but not applicable
        """
        if not restaurant.is_active:
            raise ValueError("Restaurant is not accepting orders")

        customer_name = (customer_name or "").strip()
        if not customer_name:
            raise ValueError("Customer name is required")

        order_type = str(order_type)
        if order_type not in Order.OrderType.values:
            raise ValueError(f"'{order_type}' is not a valid order type")

        if order_type == Order.OrderType.TABLE:
            if table is None:
                raise ValueError("Table orders require a table")
            if table.restaurant_id != restaurant.pk:
                raise ValueError("Table does not belong to this restaurant")
            if not table.is_active:
                raise ValueError(f"Table {table.number} is not active")
        elif table is not None:
            raise ValueError(f"{order_type} orders cannot reference a table")

        resolved = OrderService._resolve_items(restaurant, items)
        subtotal = quantize(sum((price * qty for _, qty, price, _ in resolved), ZERO))

        if order_type == Order.OrderType.DELIVERY:
            delivery_fee = DeliveryFeeService.lookup(restaurant, neighborhood=neighborhood, city=city)
        else:
            delivery_fee = ZERO

        coupon, discount = None, ZERO
        if coupon_code:
            coupon, discount = CouponService.validate(restaurant, coupon_code, subtotal)

        total = quantize(max(subtotal - discount + delivery_fee, ZERO))

        order = Order.objects.create(
            restaurant=restaurant,
            order_number=OrderService._next_order_number(restaurant),
            order_type=order_type,
            table=table,
            customer_name=customer_name,
            customer_phone=customer_phone or "",
            customer_address=customer_address or "",
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            coupon_discount=discount,
            total=total,
            payment_method=payment_method or "",
            notes=notes or "",
        )

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=unit_price,
                total_price=quantize(unit_price * quantity),
                special_instructions=instructions,
            )
            for product, quantity, unit_price, instructions in resolved
        ])

        if coupon is not None:
            CouponService.redeem(coupon, order, discount)

        logger.info(
            f"Order #{order.order_number} created at {restaurant.slug} "
            f"({order_type}, total R$ {total})"
        )
        return order

    @staticmethod
    def get_active_orders_by_table(table, customer_name=None):
        """
        Orders still on the table's bill, oldest first.

        customer_name matches exactly as typed; None means every customer.
        """
        queryset = (
            Order.objects.filter(table=table)
            .active()
            .with_items()
            .order_by('created_at', 'order_number')
        )
        if customer_name is not None:
            queryset = queryset.filter(customer_name=customer_name)
        return queryset

    @staticmethod
    def update_order_status(order_id, new_status) -> Order:
        return OrderStateMachine.transition(order_id, new_status)

    @staticmethod
    def get_order_history(restaurant):
        """Delivered and cancelled orders, newest first."""
        return (
            Order.objects.for_restaurant(restaurant)
            .terminal()
            .select_related('table')
            .with_items()
            .order_by('-created_at', '-order_number')
        )
