"""
Restaurant resolution and delivery fee lookup tests.
"""
from decimal import Decimal

import pytest

from restaurants.models import ServiceArea
from restaurants.services import DeliveryFeeService


@pytest.mark.django_db
class TestDeliveryFeeLookup:
    def test_matches_neighborhood_case_insensitively(self, restaurant):
        ServiceArea.objects.create(
            restaurant=restaurant, neighborhood="Vila Mariana", city="São Paulo", state="SP",
            delivery_fee=Decimal("6.50"),
        )

        assert DeliveryFeeService.lookup(restaurant, neighborhood="vila mariana") == Decimal("6.50")

    def test_city_narrows_match(self, restaurant):
        ServiceArea.objects.create(
            restaurant=restaurant, neighborhood="Centro", city="Campinas", state="SP", delivery_fee=Decimal("4.00")
        )
        ServiceArea.objects.create(
            restaurant=restaurant, neighborhood="Centro", city="Santos", state="SP", delivery_fee=Decimal("9.00")
        )

        assert DeliveryFeeService.lookup(restaurant, neighborhood="Centro", city="Santos") == Decimal("9.00")

    def test_inactive_area_ignored(self, restaurant):
        ServiceArea.objects.create(
            restaurant=restaurant, neighborhood="Centro", city="Campinas", state="SP",
            delivery_fee=Decimal("4.00"), is_active=False,
        )

        assert DeliveryFeeService.lookup(restaurant, neighborhood="Centro") == Decimal("7.00")

    def test_falls_back_to_restaurant_fee(self, restaurant):
        assert DeliveryFeeService.lookup(restaurant) == Decimal("7.00")


@pytest.mark.django_db
class TestRestaurantMiddleware:
    def test_header_resolves_restaurant(self, api_client, restaurant):
        response = api_client.get("/api/tables/", HTTP_X_RESTAURANT=restaurant.slug)

        assert response.status_code == 200

    def test_query_param_resolves_restaurant(self, api_client, restaurant):
        response = api_client.get("/api/tables/", {"restaurant": restaurant.slug})

        assert response.status_code == 200

    def test_unknown_slug(self, api_client):
        response = api_client.get("/api/tables/", HTTP_X_RESTAURANT="nowhere")

        assert response.status_code == 400

    def test_inactive_restaurant(self, api_client, restaurant):
        restaurant.is_active = False
        restaurant.save()

        response = api_client.get("/api/tables/", HTTP_X_RESTAURANT=restaurant.slug)

        assert response.status_code == 403
        assert response.json()["code"] == "RESTAURANT_INACTIVE"

    def test_missing_restaurant_on_scoped_endpoint(self, api_client, db):
        response = api_client.get("/api/tables/")

        assert response.status_code == 400

    def test_health_check_needs_no_restaurant(self, api_client, db):
        response = api_client.get("/api/health/")

        assert response.status_code == 200
