"""Currency converter: canonical <-> display amounts over a swapped rate snapshot.

Every stored amount is canonical (INR). Display amounts are derived on read
with ``to_display`` and converted back with ``to_canonical``. Conversion is
pure given the current snapshot.

Refreshing is single-flight: the first caller past the staleness check takes
the refresh lock and fetches; concurrent callers block on the same lock and,
once it is released, take the outcome of that attempt without fetching again. The
new snapshot replaces the old one by reference assignment, so a reader never
observes a partially updated rate map. A failed fetch leaves the stale
snapshot in place; the next attempt waits `retry_after_seconds`.
"""

import threading
import time

import structlog
from protean.exceptions import ValidationError

from pricing.currency.formatting import format_amount
from pricing.currency.snapshot import ExchangeRateSnapshot, currency_for
from pricing.currency.sources.port import ExchangeRateSource
from shared.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_AGE_SECONDS = 60 * 60
DEFAULT_RETRY_AFTER_SECONDS = 30


def _as_number(amount, field_name: str = "amount") -> float:
    if isinstance(amount, bool):
        raise ValidationError({field_name: ["Amount must be a number"]})
    try:
        return float(amount)
    except (TypeError, ValueError):
        raise ValidationError({field_name: ["Amount must be a number"]})


class CurrencyConverter:
    def __init__(
        self,
        source: ExchangeRateSource,
        canonical: str = "INR",
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        retry_after_seconds: float = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        self.source = source
        self.canonical = canonical.upper()
        self.max_age_seconds = max_age_seconds
        self.retry_after_seconds = retry_after_seconds
        self._snapshot = ExchangeRateSnapshot.fallback(self.canonical)
        self._refresh_lock = threading.Lock()
        self._attempts = 0
        self._last_failure_at: float | None = None

    @property
    def snapshot(self) -> ExchangeRateSnapshot:
        return self._snapshot

    # -------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------
    def rate_for(self, currency: str) -> float:
        """Multiplier for `currency`; unknown codes and the canonical currency are 1."""
        return self._snapshot.rate_for(currency)

    def to_display(self, amount, currency: str) -> float:
        return _as_number(amount) * self.rate_for(currency)

    def to_canonical(self, amount, currency: str) -> float:
        return _as_number(amount) / self.rate_for(currency)

    def format(self, amount_canonical, currency: str) -> str:
        """Converted amount with symbol, locale grouping and two decimals."""
        return format_amount(self.to_display(amount_canonical, currency), currency_for(currency))

    # -------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------
    def refresh_if_stale(self, max_age_seconds: float | None = None) -> ExchangeRateSnapshot:
        max_age = self.max_age_seconds if max_age_seconds is None else max_age_seconds

        if not self._snapshot.is_stale(max_age) or self._backing_off():
            return self._snapshot

        generation = self._attempts
        with self._refresh_lock:
            # Callers queued behind an attempt take its outcome, success or failure
            if generation != self._attempts or self._backing_off() or not self._snapshot.is_stale(max_age):
                return self._snapshot
            self._refresh()

        return self._snapshot

    def _backing_off(self) -> bool:
        if self._last_failure_at is None:
            return False
        return time.monotonic() - self._last_failure_at < self.retry_after_seconds

    def _refresh(self) -> None:
        try:
            rates = self.source.fetch_rates(self.canonical)
            snapshot = ExchangeRateSnapshot.fetched(self.canonical, rates)
        except (ExternalServiceError, ValidationError) as exc:
            error = exc if isinstance(exc, ExternalServiceError) else ExternalServiceError("exchange-rates", str(exc))
            self._last_failure_at = time.monotonic()
            logger.warning(
                "exchange_rate_refresh_failed",
                service=error.service,
                reason=error.reason,
                retry_after_seconds=self.retry_after_seconds,
                stale_since=self._snapshot.fetched_at.isoformat() if self._snapshot.fetched_at else None,
            )
            return
        finally:
            self._attempts += 1

        self._snapshot = snapshot
        self._last_failure_at = None
        logger.info("exchange_rates_refreshed", canonical=self.canonical, currencies=sorted(snapshot.rates))
