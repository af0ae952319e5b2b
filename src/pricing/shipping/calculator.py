"""Shipping calculator: destination country + subtotal -> fee."""

import json
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from pricing.shipping.rate import ShippingRate
from pricing.shipping.seeding import SeedShippingRates


@dataclass(frozen=True)
class ShippingQuote:
    fee: float
    is_free: bool
    free_shipping_threshold: float | None
    country_name: str


@dataclass(frozen=True)
class ShippingCountry:
    country_code: str
    country_name: str


class ShippingCalculator:
    """Reads the rate table; never writes except through ``seed_rates``.

    Must be used inside the pricing domain context.
    """

    def calculate(self, country_code: str, subtotal) -> ShippingQuote:
        if not country_code or not str(country_code).strip():
            raise ValidationError({"country_code": ["Country code is required"]})
        if isinstance(subtotal, bool) or not isinstance(subtotal, (int, float)):
            raise ValidationError({"order_total": ["Order total must be a number"]})
        if subtotal < 0:
            raise ValidationError({"order_total": ["Order total cannot be negative"]})

        code = str(country_code).strip().upper()
        rate = current_domain.repository_for(ShippingRate).find_by_country_code(code)
        if rate is None:
            raise ObjectNotFoundError({"country_code": ["Shipping not available for this country"]})

        is_free = rate.qualifies_for_free_shipping(subtotal)
        return ShippingQuote(
            fee=0.0 if is_free else rate.base_rate,
            is_free=is_free,
            free_shipping_threshold=rate.free_shipping_threshold,
            country_name=rate.country_name,
        )

    def list_countries(self) -> list[ShippingCountry]:
        rates = current_domain.repository_for(ShippingRate).all_by_country_name()
        return [ShippingCountry(country_code=r.country_code, country_name=r.country_name) for r in rates]

    def seed_rates(self, rows: list[dict]) -> dict:
        return current_domain.process(SeedShippingRates(rates=json.dumps(rows)), asynchronous=False)
