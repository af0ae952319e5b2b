"""Shared BDD fixtures for the Pricing domain."""

import pytest
from pricing.shipping.calculator import ShippingCalculator
from pytest_bdd import given, parsers


@pytest.fixture()
def calculator():
    return ShippingCalculator()


@pytest.fixture()
def error():
    return {"exc": None}


@pytest.fixture()
def outcome():
    return {}


@given(parsers.cfparse('shipping to "{country_code}" costs {base_rate:f} with free shipping from {threshold:f}'))
def rate_with_threshold(calculator, country_code, base_rate, threshold):
    calculator.seed_rates(
        [
            {
                "countryCode": country_code,
                "countryName": country_code,
                "baseRate": base_rate,
                "freeShippingThreshold": threshold,
            }
        ]
    )


@given(parsers.cfparse('shipping to "{country_code}" costs {base_rate:f} with no free shipping'))
def rate_without_threshold(calculator, country_code, base_rate):
    calculator.seed_rates([{"countryCode": country_code, "countryName": country_code, "baseRate": base_rate}])
