"""Pricing domain API package."""

from pricing.api.routes import currency_router, shipping_router

__all__ = ["shipping_router", "currency_router"]
