"""Integration tests for the shipping and currency endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pricing.api.routes import currency_router, shipping_router
from shared.api import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(shipping_router)
    app.include_router(currency_router)
    return TestClient(app)


class TestCalculateShipping:
    def test_below_threshold(self, client, india_rate):
        response = client.post("/shipping/calculate", json={"countryCode": "IN", "orderTotal": 999})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "shippingCost": 50.0,
            "isFreeShipping": False,
            "freeShippingThreshold": 1000.0,
            "countryName": "India",
        }

    def test_at_threshold(self, client, india_rate):
        response = client.post("/shipping/calculate", json={"countryCode": "IN", "orderTotal": 1000})

        body = response.json()
        assert body["shippingCost"] == 0
        assert body["isFreeShipping"] is True

    def test_unsupported_country(self, client, india_rate):
        response = client.post("/shipping/calculate", json={"countryCode": "FR", "orderTotal": 10})

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"country_code": ["Shipping not available for this country"]},
        }

    def test_negative_order_total(self, client, india_rate):
        response = client.post("/shipping/calculate", json={"countryCode": "IN", "orderTotal": -5})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_fields(self, client):
        response = client.post("/shipping/calculate", json={"countryCode": "IN"})

        assert response.status_code == 400
        assert "orderTotal" in response.json()["error"]


class TestListCountries:
    def test_countries(self, client, india_rate):
        response = client.get("/shipping/countries")

        assert response.status_code == 200
        assert response.json()["countries"] == [
            {"countryCode": "IN", "countryName": "India"},
            {"countryCode": "US", "countryName": "United States"},
        ]


class TestCurrencyEndpoints:
    def test_rates_refreshes_stale_snapshot(self, client, converter, rate_source):
        rate_source.configure(rates={"USD": 0.012})

        response = client.get("/currency/rates")

        assert response.status_code == 200
        body = response.json()
        assert body["canonical"] == "INR"
        assert body["rates"] == {"INR": 1.0, "USD": 0.012}
        assert body["fetchedAt"] is not None
        assert {c["code"] for c in body["currencies"]} == {"INR", "USD"}

    def test_rates_survive_feed_outage(self, client, converter, rate_source):
        rate_source.configure(should_succeed=False)

        response = client.get("/currency/rates")

        assert response.status_code == 200
        assert response.json()["fetchedAt"] is None
        assert response.json()["rates"]["USD"] == 0.01146

    def test_convert_to_display(self, client, converter, rate_source):
        rate_source.configure(rates={"USD": 0.012})

        response = client.get("/currency/convert", params={"amount": 1000, "currency": "usd"})

        assert response.status_code == 200
        body = response.json()
        assert body["currency"] == "USD"
        assert body["direction"] == "to_display"
        assert body["converted"] == 12.0
        assert body["formatted"] == "$12.00"

    def test_convert_to_canonical(self, client, converter, rate_source):
        rate_source.configure(rates={"USD": 0.0125})

        response = client.get(
            "/currency/convert",
            params={"amount": 25, "currency": "USD", "direction": "to_canonical"},
        )

        body = response.json()
        assert body["converted"] == 2000.0
        assert body["formatted"] == "₹2,000.00"

    def test_invalid_direction(self, client, converter):
        response = client.get(
            "/currency/convert",
            params={"amount": 25, "currency": "USD", "direction": "sideways"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
