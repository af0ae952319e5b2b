"""Exchange-rate source factory.

Provides get_rate_source() / set_rate_source() to swap implementations:
- FakeExchangeRateSource for development and testing
- HttpExchangeRateSource when EXCHANGE_RATE_URL is configured
"""

from pricing.currency.sources.fake_source import FakeExchangeRateSource
from pricing.currency.sources.http_source import HttpExchangeRateSource
from pricing.currency.sources.port import ExchangeRateSource

_current_source: ExchangeRateSource | None = None


def build_rate_source(url: str | None, timeout_seconds: float = 5.0) -> ExchangeRateSource:
    if url:
        return HttpExchangeRateSource(url=url, timeout_seconds=timeout_seconds)
    return FakeExchangeRateSource()


def get_rate_source() -> ExchangeRateSource:
    """Return the current rate source. Defaults to FakeExchangeRateSource."""
    global _current_source
    if _current_source is None:
        _current_source = FakeExchangeRateSource()
    return _current_source


def set_rate_source(source: ExchangeRateSource) -> None:
    """Override the active rate source (useful for tests)."""
    global _current_source
    _current_source = source


def reset_rate_source() -> None:
    global _current_source
    _current_source = None
