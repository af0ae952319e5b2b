"""Application tests for CurrencyConverter: conversion laws and snapshot refresh."""

import threading

import pytest
from pricing.currency import build_converter, get_converter
from pricing.currency.converter import CurrencyConverter
from pricing.currency.snapshot import FALLBACK_RATES
from pricing.currency.sources.fake_source import FakeExchangeRateSource
from pricing.currency.sources.http_source import HttpExchangeRateSource
from protean.exceptions import ValidationError
from shared.settings import Settings


class TestConversion:
    def test_canonical_currency_is_identity(self, converter):
        assert converter.to_display(1234.56, "INR") == 1234.56
        assert converter.to_canonical(1234.56, "INR") == 1234.56

    def test_to_display_uses_snapshot_rate(self, converter):
        assert converter.to_display(1000, "USD") == pytest.approx(1000 * FALLBACK_RATES["USD"])

    @pytest.mark.parametrize("currency", ["INR", "USD", "XYZ"])
    @pytest.mark.parametrize("amount", [0, 0.01, 999.99, 125000])
    def test_round_trip(self, converter, currency, amount):
        assert converter.to_canonical(converter.to_display(amount, currency), currency) == pytest.approx(amount)

    def test_unknown_currency_is_treated_as_canonical(self, converter):
        assert converter.rate_for("XYZ") == 1.0
        assert converter.to_display(500, "XYZ") == 500

    def test_non_numeric_amount_is_rejected(self, converter):
        with pytest.raises(ValidationError):
            converter.to_display("lots", "USD")

    def test_format_converts_then_formats(self, converter):
        assert converter.format(1000, "USD") == "$11.46"
        assert converter.format(123456, "INR") == "₹1,23,456.00"


class TestRefresh:
    def test_stale_snapshot_is_refreshed(self, converter, rate_source):
        rate_source.configure(rates={"USD": 0.012})

        snapshot = converter.refresh_if_stale()

        assert snapshot.rate_for("USD") == 0.012
        assert converter.rate_for("USD") == 0.012
        assert rate_source.calls == ["INR"]

    def test_fresh_snapshot_is_not_refetched(self, converter, rate_source):
        converter.refresh_if_stale()
        converter.refresh_if_stale()
        assert len(rate_source.calls) == 1

    def test_negative_max_age_always_refetches(self, converter, rate_source):
        converter.refresh_if_stale()
        converter.refresh_if_stale(max_age_seconds=-1)
        assert len(rate_source.calls) == 2

    def test_failed_fetch_keeps_previous_snapshot(self, converter, rate_source):
        before = converter.snapshot
        rate_source.configure(should_succeed=False)

        after = converter.refresh_if_stale()

        assert after is before
        assert converter.rate_for("USD") == FALLBACK_RATES["USD"]

    def test_failed_fetch_backs_off_before_retrying(self, converter, rate_source):
        rate_source.configure(should_succeed=False)
        converter.refresh_if_stale()
        converter.refresh_if_stale()
        converter.refresh_if_stale(max_age_seconds=-1)

        assert len(rate_source.calls) == 1

    def test_failed_fetch_is_retried_after_backoff(self, rate_source):
        converter = CurrencyConverter(source=rate_source, canonical="INR", retry_after_seconds=0)
        rate_source.configure(should_succeed=False)
        converter.refresh_if_stale()

        rate_source.configure(rates={"USD": 0.02})
        converter.refresh_if_stale()

        assert converter.rate_for("USD") == 0.02
        assert len(rate_source.calls) == 2

    def test_invalid_rates_keep_previous_snapshot(self, converter, rate_source):
        rate_source.configure(rates={"USD": -3})
        converter.refresh_if_stale()
        assert converter.rate_for("USD") == FALLBACK_RATES["USD"]

    def test_refresh_replaces_rather_than_mutates(self, converter, rate_source):
        old = converter.snapshot
        rate_source.configure(rates={"USD": 0.5})

        converter.refresh_if_stale()

        assert converter.snapshot is not old
        assert old.rate_for("USD") == FALLBACK_RATES["USD"]

    def test_concurrent_refreshes_fetch_once(self, converter, rate_source):
        rate_source.configure(rates={"USD": 0.013}, delay_seconds=0.2)
        barrier = threading.Barrier(8)
        seen = []

        def refresh():
            barrier.wait()
            seen.append(converter.refresh_if_stale().rate_for("USD"))

        threads = [threading.Thread(target=refresh) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(rate_source.calls) == 1
        assert seen == [0.013] * 8

    def test_concurrent_refreshes_during_outage_fetch_once(self, converter, rate_source):
        rate_source.configure(should_succeed=False, delay_seconds=0.2)
        barrier = threading.Barrier(5)
        seen = []

        def refresh():
            barrier.wait()
            seen.append(converter.refresh_if_stale())

        threads = [threading.Thread(target=refresh) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(rate_source.calls) == 1
        assert len(seen) == 5
        assert all(snapshot.fetched_at is None for snapshot in seen)

    def test_waiters_do_not_refetch_after_failure_without_backoff(self, rate_source):
        converter = CurrencyConverter(source=rate_source, canonical="INR", retry_after_seconds=0)
        rate_source.configure(should_succeed=False, delay_seconds=0.2)
        barrier = threading.Barrier(5)

        def refresh():
            barrier.wait()
            converter.refresh_if_stale()

        threads = [threading.Thread(target=refresh) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(rate_source.calls) == 1


class TestConverterWiring:
    def test_build_from_settings_without_url_uses_fake_source(self):
        converter = build_converter(Settings(exchange_rate_url="", exchange_rate_max_age_seconds=60))
        assert isinstance(converter.source, FakeExchangeRateSource)
        assert converter.max_age_seconds == 60

    def test_build_from_settings_with_url_uses_http_source(self):
        converter = build_converter(Settings(exchange_rate_url="https://rates.example/latest"))
        assert isinstance(converter.source, HttpExchangeRateSource)
        assert converter.source.url == "https://rates.example/latest"

    def test_get_converter_is_shared(self):
        assert get_converter() is get_converter()

    def test_installed_converter_is_returned(self, converter):
        assert get_converter() is converter
        assert isinstance(converter, CurrencyConverter)
