from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Optional, Tuple
from django.utils import timezone
import logging

from core_backend.money import ZERO, quantize
from orders.services import OrderService

logger = logging.getLogger(__name__)


class EmptyBill(Exception):
    """No active order on the table matches the request."""

    def __init__(self, table, customer_name=None):
        self.table = table
        self.customer_name = customer_name
        who = f" for '{customer_name}'" if customer_name is not None else ""
        super().__init__(f"Table {table.number} has no active orders{who}")


@dataclass(frozen=True)
class BillLine:
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "subtotal": str(self.subtotal),
        }


@dataclass(frozen=True)
class CustomerSubtotal:
    customer_name: str
    order_count: int
    subtotal: Decimal

    def to_dict(self):
        return {
            "customer_name": self.customer_name,
            "order_count": self.order_count,
            "subtotal": str(self.subtotal),
        }


@dataclass(frozen=True)
class ConsolidatedBill:
    """
    Snapshot of a table's active orders merged into bill lines.

    `source_order_ids` is exactly the set of orders the lines were built
    from; closing transitions those orders and no others.
    """

    table_id: int
    restaurant_id: object
    customer_name: Optional[str]
    lines: Tuple[BillLine, ...]
    source_order_ids: FrozenSet
    orders_total: Decimal
    customers: Tuple[CustomerSubtotal, ...] = ()
    generated_at: datetime = field(default_factory=timezone.now)

    @property
    def subtotal(self) -> Decimal:
        return quantize(sum((line.subtotal for line in self.lines), ZERO))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self):
        return {
            "table_id": self.table_id,
            "restaurant_id": str(self.restaurant_id),
            "customer_name": self.customer_name,
            "lines": [line.to_dict() for line in self.lines],
            "subtotal": str(self.subtotal),
            "item_count": self.item_count,
            "orders_total": str(self.orders_total),
            "source_order_ids": sorted(str(order_id) for order_id in self.source_order_ids),
            "customers": [customer.to_dict() for customer in self.customers],
            "generated_at": self.generated_at.isoformat(),
        }


class BillingConsolidator:
    """Builds a ConsolidatedBill from a table's active orders. Read-only."""

    @staticmethod
    def consolidate(table, customer_name=None) -> ConsolidatedBill:
        """
        Merge the table's active orders into one bill.

        Items are grouped by (product, unit price): the same product ordered
        at two prices yields two lines. The bill subtotal is the sum of the
        lines; the sum of the orders' stored totals is kept only as a
        cross-check.

        Raises:
            EmptyBill: no active order matches
        """
        orders = list(OrderService.get_active_orders_by_table(table, customer_name=customer_name))
        if not orders:
            raise EmptyBill(table, customer_name)

        groups = OrderedDict()
        per_customer = {}
        orders_total = ZERO

        for order in orders:
            orders_total += order.total
            order_subtotal = ZERO

            for item in order.items.all():
                unit_price = quantize(item.unit_price)
                key = (item.product_id, unit_price)
                line_total = unit_price * item.quantity
                order_subtotal += line_total

                group = groups.setdefault(
                    key, {"name": item.product.name, "quantity": 0, "subtotal": ZERO}
                )
                group["quantity"] += item.quantity
                group["subtotal"] += line_total

            count, subtotal = per_customer.get(order.customer_name, (0, ZERO))
            per_customer[order.customer_name] = (count + 1, subtotal + order_subtotal)

        lines = tuple(
            sorted(
                (
                    BillLine(
                        product_id=product_id,
                        product_name=group["name"],
                        unit_price=unit_price,
                        quantity=group["quantity"],
                        subtotal=quantize(group["subtotal"]),
                    )
                    for (product_id, unit_price), group in groups.items()
                ),
                key=lambda line: (line.product_name, line.unit_price, line.product_id),
            )
        )
        customers = tuple(
            CustomerSubtotal(customer_name=name, order_count=count, subtotal=quantize(subtotal))
            for name, (count, subtotal) in sorted(per_customer.items())
        )

        bill = ConsolidatedBill(
            table_id=table.pk,
            restaurant_id=table.restaurant_id,
            customer_name=customer_name,
            lines=lines,
            source_order_ids=frozenset(order.pk for order in orders),
            orders_total=quantize(orders_total),
            customers=customers,
        )

        if bill.orders_total != bill.subtotal:
            logger.debug(
                f"Table {table.number}: order totals R$ {bill.orders_total} differ from "
                f"bill subtotal R$ {bill.subtotal}"
            )
        return bill
