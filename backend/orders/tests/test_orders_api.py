"""
Orders API Tests

Covers creation, restaurant scoping, the status endpoint and history.
"""
import pytest
from datetime import timedelta
from django.utils import timezone

from orders.models import Order

Status = Order.OrderStatus


@pytest.mark.django_db
class TestOrderCreateAPI:
    def test_create_table_order(self, restaurant_client, table, burger, soda):
        response = restaurant_client.post(
            "/api/orders/",
            {
                "order_type": "table",
                "customer_name": "Ana",
                "table": table.pk,
                "items": [
                    {"product": burger.pk, "quantity": 2},
                    {"product": soda.pk, "quantity": 1, "special_instructions": "sem gelo"},
                ],
            },
            format="json",
        )

        assert response.status_code == 201, response.data
        assert response.data["status"] == "pending"
        assert response.data["order_number"] == 1
        assert response.data["subtotal"] == "48.00"
        assert len(response.data["items"]) == 2

    def test_create_without_restaurant_header_is_rejected(self, api_client, burger):
        response = api_client.post(
            "/api/orders/",
            {"order_type": "pickup", "customer_name": "Ana", "items": [{"product": burger.pk}]},
            format="json",
        )
        assert response.status_code == 400

    def test_create_with_unknown_product_returns_400(self, restaurant_client):
        response = restaurant_client.post(
            "/api/orders/",
            {"order_type": "pickup", "customer_name": "Ana", "items": [{"product": 999999}]},
            format="json",
        )
        assert response.status_code == 400
        assert "error" in response.data

    def test_create_with_invalid_coupon_returns_coupon_code(self, restaurant_client, burger):
        response = restaurant_client.post(
            "/api/orders/",
            {
                "order_type": "pickup",
                "customer_name": "Ana",
                "coupon_code": "NOPE",
                "items": [{"product": burger.pk}],
            },
            format="json",
        )
        assert response.status_code == 400
        assert response.data["code"] == "INVALID_COUPON"

    def test_create_with_empty_items_returns_400(self, restaurant_client):
        response = restaurant_client.post(
            "/api/orders/",
            {"order_type": "pickup", "customer_name": "Ana", "items": []},
            format="json",
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestOrderReadAPI:
    def test_list_is_scoped_to_restaurant(self, restaurant_client, make_order, other_restaurant, burger):
        from products.models import Product

        mine = make_order(items=[(burger, 1)])
        pizza = Product.objects.create(restaurant=other_restaurant, name="Pizza", price="30.00")
        make_order(items=[(pizza, 1)], restaurant=other_restaurant)

        response = restaurant_client.get("/api/orders/")

        assert response.status_code == 200
        assert [o["id"] for o in response.data["results"]] == [str(mine.id)]

    def test_other_restaurants_order_is_not_found(self, restaurant_client, make_order, other_restaurant):
        from products.models import Product

        pizza = Product.objects.create(restaurant=other_restaurant, name="Pizza", price="30.00")
        foreign = make_order(items=[(pizza, 1)], restaurant=other_restaurant)

        response = restaurant_client.get(f"/api/orders/{foreign.id}/")

        assert response.status_code == 404

    def test_filter_by_status(self, restaurant_client, make_order, burger):
        make_order(items=[(burger, 1)])
        ready = make_order(items=[(burger, 1)], status=Status.READY)

        response = restaurant_client.get("/api/orders/", {"status": "ready"})

        assert [o["id"] for o in response.data["results"]] == [str(ready.id)]

    def test_unknown_restaurant_slug_returns_400(self, api_client):
        response = api_client.get("/api/orders/", HTTP_X_RESTAURANT="nowhere")
        assert response.status_code == 400
        assert response.json()["code"] == "RESTAURANT_NOT_FOUND"


@pytest.mark.django_db
class TestOrderStatusAPI:
    def test_advance_status(self, restaurant_client, make_order, burger):
        order = make_order(items=[(burger, 1)])

        response = restaurant_client.post(f"/api/orders/{order.id}/status/", {"status": "confirmed"}, format="json")

        assert response.status_code == 200
        assert response.data["status"] == "confirmed"

    def test_terminal_order_returns_invalid_transition(self, restaurant_client, make_order, burger):
        order = make_order(items=[(burger, 1)], status=Status.DELIVERED)

        response = restaurant_client.post(f"/api/orders/{order.id}/status/", {"status": "cancelled"}, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_TRANSITION"
        order.refresh_from_db()
        assert order.status == Status.DELIVERED

    def test_backward_move_is_rejected(self, restaurant_client, make_order, burger):
        order = make_order(items=[(burger, 1)], status=Status.PREPARING)

        response = restaurant_client.post(f"/api/orders/{order.id}/status/", {"status": "pending"}, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_TRANSITION"

    def test_unknown_status_value_is_rejected(self, restaurant_client, make_order, burger):
        order = make_order(items=[(burger, 1)])

        response = restaurant_client.post(f"/api/orders/{order.id}/status/", {"status": "eaten"}, format="json")

        assert response.status_code == 400

    def test_conflict_returns_409(self, restaurant_client, make_order, burger, monkeypatch):
        from orders.exceptions import ConflictError
        from orders.state_machine import OrderStateMachine

        order = make_order(items=[(burger, 1)])

        def lose_race(order, new_status, notify=True):
            raise ConflictError(order, order.status, new_status)

        monkeypatch.setattr(OrderStateMachine, "apply", staticmethod(lose_race))

        response = restaurant_client.post(f"/api/orders/{order.id}/status/", {"status": "confirmed"}, format="json")

        assert response.status_code == 409
        assert response.data["code"] == "CONFLICT"


@pytest.mark.django_db
class TestOrderHistoryAPI:
    def test_history_lists_terminal_orders(self, restaurant_client, make_order, burger):
        make_order(items=[(burger, 1)])
        delivered = make_order(items=[(burger, 1)], status=Status.DELIVERED)

        response = restaurant_client.get("/api/orders/history/")

        assert response.status_code == 200
        assert [o["id"] for o in response.data["results"]] == [str(delivered.id)]

    def test_history_filters(self, restaurant_client, make_order, table, burger):
        table_order = make_order(items=[(burger, 1)], table=table, status=Status.DELIVERED)
        make_order(items=[(burger, 1)], status=Status.CANCELLED)
        old = make_order(items=[(burger, 1)], table=table, status=Status.DELIVERED)
        Order.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=10))

        response = restaurant_client.get(
            "/api/orders/history/",
            {"order_type": "table", "table": table.pk, "date_from": timezone.localdate().isoformat()},
        )

        assert [o["id"] for o in response.data["results"]] == [str(table_order.id)]
