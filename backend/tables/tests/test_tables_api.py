"""
Tables API Tests

Table management, bill preview and close endpoints.
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import override_settings

from core_backend.infrastructure.locks import cache_lock
from orders.models import Order
from tables.models import Table
from tables.services.closing_service import table_close_lock_key

Status = Order.OrderStatus


@pytest.mark.django_db
class TestTableManagementAPI:
    def test_create_table(self, restaurant_client, restaurant):
        response = restaurant_client.post("/api/tables/", {"number": "12", "capacity": 6}, format="json")

        assert response.status_code == 201, response.data
        table = Table.objects.get(pk=response.data["id"])
        assert table.restaurant == restaurant
        assert table.qr_code

    def test_duplicate_number_rejected(self, restaurant_client, table):
        response = restaurant_client.post("/api/tables/", {"number": table.number}, format="json")

        assert response.status_code == 400

    def test_list_shows_occupancy(self, restaurant_client, restaurant, table, make_order, burger):
        Table.objects.create(restaurant=restaurant, number="6")
        make_order(items=[(burger, 1)], table=table)

        response = restaurant_client.get("/api/tables/")

        occupancy = {row["number"]: row["is_occupied"] for row in response.data["results"]}
        assert occupancy == {"5": True, "6": False}

    def test_list_scoped_to_restaurant(self, restaurant_client, other_restaurant, table):
        Table.objects.create(restaurant=other_restaurant, number="99")

        response = restaurant_client.get("/api/tables/")

        assert [row["number"] for row in response.data["results"]] == ["5"]

    def test_delete_deactivates(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 1)], table=table, status=Status.DELIVERED)

        response = restaurant_client.delete(f"/api/tables/{table.pk}/")

        assert response.status_code == 204
        table.refresh_from_db()
        assert table.is_active is False

    def test_qr_lookup(self, api_client, table):
        response = api_client.get(f"/api/tables/qr/{table.qr_code}/")

        assert response.status_code == 200
        assert response.data["number"] == "5"
        assert response.data["restaurant_slug"] == table.restaurant.slug

    def test_qr_lookup_inactive_table(self, api_client, table):
        table.is_active = False
        table.save()

        response = api_client.get(f"/api/tables/qr/{table.qr_code}/")

        assert response.status_code == 404

    def test_table_orders(self, restaurant_client, table, make_order, burger):
        active = make_order(items=[(burger, 1)], table=table)
        make_order(items=[(burger, 1)], table=table, status=Status.DELIVERED)

        response = restaurant_client.get(f"/api/tables/{table.pk}/orders/")

        assert [o["id"] for o in response.data] == [str(active.id)]


@pytest.mark.django_db
class TestBillPreviewAPI:
    def test_preview(self, restaurant_client, table, make_order, burger, soda):
        make_order(items=[(burger, 2)], table=table)
        make_order(items=[(soda, 1), (burger, 1)], table=table, status=Status.PREPARING)

        response = restaurant_client.get(f"/api/tables/{table.pk}/bill-preview/")

        assert response.status_code == 200
        assert response.data["is_empty"] is False
        assert response.data["subtotal"] == "68.00"
        assert [(line["product_name"], line["quantity"], line["subtotal"]) for line in response.data["lines"]] == [
            ("Burger", 3, "60.00"),
            ("Soda", 1, "8.00"),
        ]

    def test_preview_by_customer(self, restaurant_client, table, make_order, burger, soda):
        make_order(items=[(burger, 1)], table=table, customer_name="Ana")
        make_order(items=[(soda, 1)], table=table, customer_name="Bruno")

        response = restaurant_client.get(f"/api/tables/{table.pk}/bill-preview/", {"customer_name": "Bruno"})

        assert response.data["subtotal"] == "8.00"

    def test_empty_preview(self, restaurant_client, table):
        response = restaurant_client.get(f"/api/tables/{table.pk}/bill-preview/")

        assert response.status_code == 200
        assert response.data["is_empty"] is True
        assert response.data["subtotal"] == "0.00"


@pytest.mark.django_db
class TestCloseTableAPI:
    def test_close(self, restaurant_client, table, make_order, burger, soda):
        make_order(items=[(burger, 2)], table=table)
        make_order(items=[(soda, 1), (burger, 1)], table=table, status=Status.PREPARING)

        response = restaurant_client.post(
            f"/api/tables/{table.pk}/close/",
            {"split_bill": False, "tip_enabled": False},
            format="json",
        )

        assert response.status_code == 200, response.data
        assert response.data["amounts"]["total"] == "68.00"
        assert response.data["closed_count"] == 2
        assert not Order.objects.filter(table=table).active().exists()

    def test_close_with_tip_split(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 5)], table=table)

        response = restaurant_client.post(
            f"/api/tables/{table.pk}/close/",
            {"split_bill": True, "number_of_people": 4, "tip_enabled": True, "tip_percent": "10"},
            format="json",
        )

        assert response.data["amounts"]["per_person"] == "27.50"
        assert response.data["amounts"]["total"] == "110.00"

    @override_settings(TIP_PERCENT_MAX=30)
    def test_close_clamps_oversized_tip_percent(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 5)], table=table)

        response = restaurant_client.post(
            f"/api/tables/{table.pk}/close/",
            {"tip_enabled": True, "tip_percent": "1000"},
            format="json",
        )

        assert response.status_code == 200, response.data
        assert Decimal(response.data["amounts"]["tip_percent"]) == Decimal("30")
        assert response.data["amounts"]["tip_amount"] == "30.00"
        assert response.data["amounts"]["total"] == "130.00"

    def test_close_accepts_fractional_tip_percent(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 5)], table=table)

        response = restaurant_client.post(
            f"/api/tables/{table.pk}/close/",
            {"tip_enabled": True, "tip_percent": "12.345"},
            format="json",
        )

        assert response.status_code == 200, response.data
        assert response.data["amounts"]["tip_amount"] == "12.34"
        assert response.data["amounts"]["total"] == "112.34"

    def test_close_clamps_negative_tip_percent(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 1)], table=table)

        response = restaurant_client.post(
            f"/api/tables/{table.pk}/close/",
            {"tip_enabled": True, "tip_percent": "-5"},
            format="json",
        )

        assert response.status_code == 200, response.data
        assert response.data["amounts"]["tip_amount"] == "0.00"
        assert response.data["amounts"]["total"] == "20.00"

    def test_close_empty_table(self, restaurant_client, table):
        response = restaurant_client.post(f"/api/tables/{table.pk}/close/", {}, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "NOTHING_TO_CLOSE"

    def test_close_by_user_requires_selected_user(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 1)], table=table)

        response = restaurant_client.post(f"/api/tables/{table.pk}/close/", {"close_by_user": True}, format="json")

        assert response.status_code == 400

    @override_settings(TABLE_CLOSE_LOCK_WAIT=0.1)
    def test_close_while_locked(self, restaurant_client, table, make_order, burger):
        make_order(items=[(burger, 1)], table=table)

        with cache_lock(table_close_lock_key(table)):
            response = restaurant_client.post(f"/api/tables/{table.pk}/close/", {}, format="json")

        assert response.status_code == 423
        assert response.data["code"] == "TABLE_LOCK_BUSY"

    def test_partial_failure_returns_409_with_ids(self, restaurant_client, table, make_order, burger):
        from orders.exceptions import ConflictError
        from orders.state_machine import OrderStateMachine

        make_order(items=[(burger, 1)], table=table)
        failing = make_order(items=[(burger, 1)], table=table)
        original_apply = OrderStateMachine.apply.__func__

        def apply_with_race(cls, order, new_status, notify=True):
            if order.pk == failing.pk:
                raise ConflictError(order, order.status, new_status)
            return original_apply(cls, order, new_status, notify=notify)

        with patch.object(OrderStateMachine, "apply", classmethod(apply_with_race)):
            response = restaurant_client.post(f"/api/tables/{table.pk}/close/", {}, format="json")

        assert response.status_code == 409
        assert response.data["code"] == "PARTIAL_CLOSE_FAILURE"
        assert response.data["failed_order_ids"] == [str(failing.pk)]
        assert len(response.data["closed_order_ids"]) == 1

    def test_cannot_close_other_restaurants_table(self, restaurant_client, other_restaurant):
        foreign = Table.objects.create(restaurant=other_restaurant, number="1")

        response = restaurant_client.post(f"/api/tables/{foreign.pk}/close/", {}, format="json")

        assert response.status_code == 404
