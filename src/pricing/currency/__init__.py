"""Process-wide currency converter.

The converter is a constructed service rather than a hidden singleton:
get_converter() builds one from settings on first use, set_converter()
installs a specific instance (tests), reset_converter() drops it.
"""

from pricing.currency.converter import CurrencyConverter
from pricing.currency.sources import build_rate_source, get_rate_source
from shared.settings import Settings

_current_converter: CurrencyConverter | None = None


def build_converter(settings: Settings) -> CurrencyConverter:
    source = (
        build_rate_source(settings.exchange_rate_url, settings.exchange_rate_timeout_seconds)
        if settings.exchange_rate_url
        else get_rate_source()
    )
    return CurrencyConverter(
        source=source,
        canonical=settings.canonical_currency,
        max_age_seconds=settings.exchange_rate_max_age_seconds,
        retry_after_seconds=settings.exchange_rate_retry_after_seconds,
    )


def get_converter() -> CurrencyConverter:
    global _current_converter
    if _current_converter is None:
        _current_converter = build_converter(Settings())
    return _current_converter


def set_converter(converter: CurrencyConverter) -> None:
    global _current_converter
    _current_converter = converter


def reset_converter() -> None:
    global _current_converter
    _current_converter = None
