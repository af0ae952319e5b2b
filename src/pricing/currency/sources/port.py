"""Exchange-rate source port (abstract interface).

Adapters return multipliers against the requested base currency. Any
failure (network, timeout, malformed payload) is surfaced as
``ExternalServiceError`` so the converter can keep its stale snapshot.
"""

from abc import ABC, abstractmethod


class ExchangeRateSource(ABC):
    """Abstract exchange-rate provider."""

    @abstractmethod
    def fetch_rates(self, base: str) -> dict[str, float]:
        """Return {currency_code: multiplier} relative to `base`."""
        ...
