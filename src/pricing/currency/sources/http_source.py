"""HTTP exchange-rate source.

Expects a JSON body of the form ``{"base_code": "INR", "rates": {"USD": 0.012, ...}}``
(``base`` is accepted in place of ``base_code``). The URL may carry a
``{base}`` placeholder for providers that take the base as a path segment;
otherwise the base is sent as a ``base`` query parameter. A payload quoted
against any other base is rejected.
"""

import requests
import structlog

from pricing.currency.sources.port import ExchangeRateSource
from shared.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)


class HttpExchangeRateSource(ExchangeRateSource):
    def __init__(self, url: str, timeout_seconds: float = 5.0):
        self.url = url
        self.timeout_seconds = timeout_seconds

    def _request(self, base: str) -> tuple[str, dict | None]:
        if "{base}" in self.url:
            return self.url.replace("{base}", base), None
        return self.url, {"base": base}

    def fetch_rates(self, base: str) -> dict[str, float]:
        url, params = self._request(base)
        try:
            resp = requests.get(url, params=params, timeout=self.timeout_seconds)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as exc:
            raise ExternalServiceError("exchange-rates", str(exc)) from exc
        except ValueError as exc:
            raise ExternalServiceError("exchange-rates", f"Invalid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise ExternalServiceError("exchange-rates", "Response has no rates")

        rates = payload.get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ExternalServiceError("exchange-rates", "Response has no rates")

        quoted_base = str(payload.get("base_code") or payload.get("base") or "").upper()
        if quoted_base != base.upper():
            raise ExternalServiceError(
                "exchange-rates", f"Rates are quoted against {quoted_base or 'an unknown base'}, expected {base}"
            )

        logger.debug("exchange_rates_fetched", url=url, base=base, count=len(rates))
        return rates
