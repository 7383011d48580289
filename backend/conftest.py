"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from decimal import Decimal
from django.core.cache import cache


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test.

    Table close locks live in the cache; a lock leaking out of one test
    would make the next close on the same key report the table as busy.
    """
    yield  # Run the test
    cache.clear()


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def restaurant(db):
    from restaurants.models import Restaurant
    return Restaurant.objects.create(
        name='Cantina da Ana',
        slug='cantina-da-ana',
        notification_whatsapp='5511999990000',
        delivery_fee=Decimal('7.00'),
    )


@pytest.fixture
def other_restaurant(db):
    from restaurants.models import Restaurant
    return Restaurant.objects.create(name='Bar do Bruno', slug='bar-do-bruno')


@pytest.fixture
def table(restaurant):
    """Table 5 of the default restaurant."""
    from tables.models import Table
    return Table.objects.create(restaurant=restaurant, number='5')


@pytest.fixture
def burger(restaurant):
    from products.models import Product
    return Product.objects.create(restaurant=restaurant, name='Burger', price=Decimal('20.00'))


@pytest.fixture
def soda(restaurant):
    from products.models import Product
    return Product.objects.create(restaurant=restaurant, name='Soda', price=Decimal('8.00'))


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def make_order(restaurant):
    """
    Factory for orders created through OrderService.

    `items` is a list of (product, quantity) pairs. Pass `status` to move
    the order straight to a status without going through the state machine.

    Usage:
        def test_something(make_order, table, burger):
            order = make_order(items=[(burger, 2)], table=table, status='preparing')
    """
    from orders.models import Order
    from orders.services import OrderService

    def _make_order(items, table=None, customer_name='Ana', status=None, order_type=None, **kwargs):
        if order_type is None:
            order_type = Order.OrderType.TABLE if table is not None else Order.OrderType.PICKUP
        order = OrderService.create_order(
            restaurant=kwargs.pop('restaurant', restaurant),
            order_type=order_type,
            items=[{'product': product.pk, 'quantity': quantity} for product, quantity in items],
            customer_name=customer_name,
            table=table,
            **kwargs,
        )
        if status is not None:
            Order.objects.filter(pk=order.pk).update(status=status)
            order.refresh_from_db()
        return order

    return _make_order


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def restaurant_client(api_client, restaurant):
    """
    API client that sends the default restaurant's X-Restaurant header.

    Usage:
        def test_orders(restaurant_client):
            response = restaurant_client.get('/api/orders/')
    """
    api_client.credentials(HTTP_X_RESTAURANT=restaurant.slug)
    return api_client
