"""
Billing Consolidator Tests

The bill groups items by (product, unit price), never merges two prices
into one line, and only counts active orders.
"""
from decimal import Decimal

import pytest

from orders.models import Order, OrderItem
from products.models import Product
from tables.services import BillingConsolidator, EmptyBill

Status = Order.OrderStatus


@pytest.mark.django_db
class TestConsolidate:
    def test_table_five_scenario(self, make_order, table, burger, soda):
        order_a = make_order(items=[(burger, 2)], table=table)
        order_b = make_order(items=[(soda, 1), (burger, 1)], table=table, status=Status.PREPARING)

        bill = BillingConsolidator.consolidate(table)

        assert bill.subtotal == Decimal("68.00")
        assert [(line.product_name, line.quantity, line.subtotal) for line in bill.lines] == [
            ("Burger", 3, Decimal("60.00")),
            ("Soda", 1, Decimal("8.00")),
        ]
        assert bill.source_order_ids == frozenset({order_a.pk, order_b.pk})
        assert bill.orders_total == Decimal("68.00")

    def test_same_product_at_two_prices_gives_two_lines(self, make_order, table, burger):
        make_order(items=[(burger, 1)], table=table)
        Product.objects.filter(pk=burger.pk).update(price=Decimal("22.00"))
        make_order(items=[(burger, 2)], table=table)

        bill = BillingConsolidator.consolidate(table)

        assert [(line.unit_price, line.quantity, line.subtotal) for line in bill.lines] == [
            (Decimal("20.00"), 1, Decimal("20.00")),
            (Decimal("22.00"), 2, Decimal("44.00")),
        ]
        assert bill.subtotal == Decimal("64.00")

    def test_terminal_and_out_for_delivery_orders_are_excluded(self, make_order, table, burger, soda):
        active = make_order(items=[(burger, 1)], table=table, status=Status.READY)
        make_order(items=[(soda, 5)], table=table, status=Status.DELIVERED)
        make_order(items=[(soda, 5)], table=table, status=Status.CANCELLED)
        make_order(items=[(soda, 5)], table=table, status=Status.OUT_FOR_DELIVERY)

        bill = BillingConsolidator.consolidate(table)

        assert bill.source_order_ids == frozenset({active.pk})
        assert bill.subtotal == Decimal("20.00")

    def test_customer_filter(self, make_order, table, burger, soda):
        ana = make_order(items=[(burger, 1)], table=table, customer_name="Ana")
        make_order(items=[(soda, 1)], table=table, customer_name="Bruno")

        bill = BillingConsolidator.consolidate(table, customer_name="Ana")

        assert bill.customer_name == "Ana"
        assert bill.source_order_ids == frozenset({ana.pk})
        assert bill.subtotal == Decimal("20.00")

    def test_customer_breakdown(self, make_order, table, burger, soda):
        make_order(items=[(burger, 1)], table=table, customer_name="Bruno")
        make_order(items=[(soda, 2)], table=table, customer_name="Ana")
        make_order(items=[(soda, 1)], table=table, customer_name="Ana")

        bill = BillingConsolidator.consolidate(table)

        assert [(c.customer_name, c.order_count, c.subtotal) for c in bill.customers] == [
            ("Ana", 2, Decimal("24.00")),
            ("Bruno", 1, Decimal("20.00")),
        ]

    def test_subtotal_ignores_stale_order_totals(self, make_order, table, burger):
        order = make_order(items=[(burger, 1)], table=table)
        Order.objects.filter(pk=order.pk).update(total=Decimal("27.00"))

        bill = BillingConsolidator.consolidate(table)

        assert bill.subtotal == Decimal("20.00")
        assert bill.orders_total == Decimal("27.00")

    def test_empty_table_raises(self, table):
        with pytest.raises(EmptyBill):
            BillingConsolidator.consolidate(table)

    def test_unknown_customer_raises(self, make_order, table, burger):
        make_order(items=[(burger, 1)], table=table, customer_name="Ana")

        with pytest.raises(EmptyBill):
            BillingConsolidator.consolidate(table, customer_name="ana")

    def test_consolidate_does_not_mutate(self, make_order, table, burger):
        order = make_order(items=[(burger, 1)], table=table)

        BillingConsolidator.consolidate(table)

        order.refresh_from_db()
        assert order.status == Status.PENDING
        assert OrderItem.objects.filter(order=order).count() == 1

    def test_to_dict(self, make_order, table, burger):
        order = make_order(items=[(burger, 2)], table=table)

        data = BillingConsolidator.consolidate(table).to_dict()

        assert data["subtotal"] == "40.00"
        assert data["item_count"] == 2
        assert data["lines"][0]["unit_price"] == "20.00"
        assert data["source_order_ids"] == [str(order.pk)]
