"""Supported display currencies and the immutable exchange-rate snapshot."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Mapping

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str
    locale: str


SUPPORTED_CURRENCIES = {
    "INR": Currency(code="INR", symbol="₹", name="Indian Rupee", locale="en-IN"),
    "USD": Currency(code="USD", symbol="$", name="US Dollar", locale="en-US"),
}

# Multipliers against INR used until the first successful fetch
FALLBACK_RATES = {"INR": 1.0, "USD": 0.01146}


def currency_for(code: str) -> Currency:
    """Registry lookup; unknown codes get a bare currency with en-US grouping."""
    code = (code or "").upper()
    return SUPPORTED_CURRENCIES.get(code) or Currency(code=code, symbol=f"{code} ", name=code, locale="en-US")


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    """Currency code -> multiplier against the canonical currency.

    A snapshot is never mutated. Refreshing builds a new one and the
    converter swaps its reference, so readers always see a consistent map.
    """

    canonical: str
    rates: Mapping[str, float] = field(default_factory=dict)
    fetched_at: datetime | None = None

    def __post_init__(self):
        rates = {}
        for code, rate in dict(self.rates).items():
            try:
                value = float(rate)
            except (TypeError, ValueError):
                raise ValidationError({"rates": [f"Rate for {code} is not a number"]})
            if value <= 0:
                raise ValidationError({"rates": [f"Rate for {code} must be positive"]})
            rates[code.upper()] = value
        rates[self.canonical] = 1.0
        object.__setattr__(self, "rates", MappingProxyType(rates))

    @classmethod
    def fallback(cls, canonical: str = "INR") -> "ExchangeRateSnapshot":
        rates = FALLBACK_RATES if canonical == "INR" else {}
        return cls(canonical=canonical, rates=rates, fetched_at=None)

    @classmethod
    def fetched(cls, canonical: str, rates: Mapping[str, float]) -> "ExchangeRateSnapshot":
        return cls(canonical=canonical, rates=rates, fetched_at=datetime.now(UTC))

    def rate_for(self, code: str) -> float:
        return self.rates.get((code or "").upper(), 1.0)

    def age_seconds(self, now: datetime | None = None) -> float | None:
        if self.fetched_at is None:
            return None
        return ((now or datetime.now(UTC)) - self.fetched_at).total_seconds()

    def is_stale(self, max_age_seconds: float, now: datetime | None = None) -> bool:
        age = self.age_seconds(now)
        return age is None or age > max_age_seconds
