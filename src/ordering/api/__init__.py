"""Ordering domain API package."""

from ordering.api.routes import cart_router, quote_admin_router, quote_router

__all__ = ["cart_router", "quote_router", "quote_admin_router"]
