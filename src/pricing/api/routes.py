"""FastAPI routes for the Pricing domain: shipping and currency."""

from typing import Literal

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool

from pricing.api.schemas import (
    ConvertResponse,
    CountriesResponse,
    CountrySchema,
    CurrencySchema,
    RatesResponse,
    ShippingCalculateRequest,
    ShippingCalculateResponse,
)
from pricing.currency import get_converter
from pricing.currency.snapshot import SUPPORTED_CURRENCIES
from pricing.shipping.calculator import ShippingCalculator

# ---------------------------------------------------------------------------
# Shipping Router
# ---------------------------------------------------------------------------
shipping_router = APIRouter(prefix="/shipping", tags=["shipping"])


@shipping_router.post("/calculate", response_model=ShippingCalculateResponse)
async def calculate_shipping(body: ShippingCalculateRequest) -> ShippingCalculateResponse:
    quote = ShippingCalculator().calculate(body.country_code, body.order_total)
    return ShippingCalculateResponse(
        shipping_cost=quote.fee,
        is_free_shipping=quote.is_free,
        free_shipping_threshold=quote.free_shipping_threshold,
        country_name=quote.country_name,
    )


@shipping_router.get("/countries", response_model=CountriesResponse)
async def list_countries() -> CountriesResponse:
    countries = ShippingCalculator().list_countries()
    return CountriesResponse(
        countries=[CountrySchema(country_code=c.country_code, country_name=c.country_name) for c in countries]
    )


# ---------------------------------------------------------------------------
# Currency Router
# ---------------------------------------------------------------------------
currency_router = APIRouter(prefix="/currency", tags=["currency"])


@currency_router.get("/rates", response_model=RatesResponse)
async def get_rates() -> RatesResponse:
    converter = get_converter()
    snapshot = await run_in_threadpool(converter.refresh_if_stale)
    return RatesResponse(
        canonical=snapshot.canonical,
        rates=dict(snapshot.rates),
        fetched_at=snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
        currencies=[
            CurrencySchema(code=c.code, symbol=c.symbol, name=c.name, locale=c.locale)
            for c in SUPPORTED_CURRENCIES.values()
        ],
    )


@currency_router.get("/convert", response_model=ConvertResponse)
async def convert_amount(
    amount: float = Query(...),
    currency: str = Query(..., min_length=1),
    direction: Literal["to_display", "to_canonical"] = Query("to_display"),
) -> ConvertResponse:
    converter = get_converter()
    await run_in_threadpool(converter.refresh_if_stale)

    if direction == "to_display":
        converted = converter.to_display(amount, currency)
        formatted = converter.format(amount, currency)
    else:
        converted = converter.to_canonical(amount, currency)
        formatted = converter.format(converted, converter.canonical)

    return ConvertResponse(
        amount=amount,
        currency=currency.upper(),
        direction=direction,
        converted=round(converted, 2),
        formatted=formatted,
    )
