"""Fake exchange-rate source: serves configurable rates from memory."""

import time

from pricing.currency.snapshot import FALLBACK_RATES
from pricing.currency.sources.port import ExchangeRateSource
from shared.exceptions import ExternalServiceError


class FakeExchangeRateSource(ExchangeRateSource):
    """Rate source for development and tests.

    Counts fetches so tests can assert that concurrent refreshes collapse
    into a single call.
    """

    def __init__(self):
        self.rates = dict(FALLBACK_RATES)
        self.should_succeed = True
        self.failure_reason = "Rate provider unavailable"
        self.delay_seconds = 0.0
        self.calls: list[str] = []

    def configure(
        self,
        rates: dict[str, float] | None = None,
        should_succeed: bool = True,
        failure_reason: str = "Rate provider unavailable",
        delay_seconds: float = 0.0,
    ):
        """Configure the fake source behavior for testing."""
        if rates is not None:
            self.rates = dict(rates)
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds

    def fetch_rates(self, base: str) -> dict[str, float]:
        self.calls.append(base)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if not self.should_succeed:
            raise ExternalServiceError("exchange-rates", self.failure_reason)
        return dict(self.rates)

    def reset(self):
        self.rates = dict(FALLBACK_RATES)
        self.should_succeed = True
        self.failure_reason = "Rate provider unavailable"
        self.delay_seconds = 0.0
        self.calls.clear()
