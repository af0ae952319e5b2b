"""Pydantic request/response schemas for the Pricing API.

The storefront speaks camelCase; fields are declared in snake_case and
serialised through a camelCase alias.
"""

from pydantic import Field

from shared.schemas import CamelModel


# ---------------------------------------------------------------------------
# Shipping
# ---------------------------------------------------------------------------
class ShippingCalculateRequest(CamelModel):
    country_code: str = Field(min_length=1)
    order_total: float

    model_config = {"json_schema_extra": {"examples": [{"countryCode": "IN", "orderTotal": 999.0}]}}


class ShippingCalculateResponse(CamelModel):
    success: bool = True
    shipping_cost: float
    is_free_shipping: bool
    free_shipping_threshold: float | None = None
    country_name: str


class CountrySchema(CamelModel):
    country_code: str
    country_name: str


class CountriesResponse(CamelModel):
    success: bool = True
    countries: list[CountrySchema]


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------
class CurrencySchema(CamelModel):
    code: str
    symbol: str
    name: str
    locale: str


class RatesResponse(CamelModel):
    success: bool = True
    canonical: str
    rates: dict[str, float]
    fetched_at: str | None = None
    currencies: list[CurrencySchema]


class ConvertResponse(CamelModel):
    success: bool = True
    amount: float
    currency: str
    direction: str
    converted: float
    formatted: str
