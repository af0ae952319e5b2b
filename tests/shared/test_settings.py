"""Tests for settings loading: domain.toml [custom] values and environment overrides."""

from types import SimpleNamespace

import pytest
from shared.settings import Settings, load_settings


def _domain(custom=None):
    return SimpleNamespace(config={"custom": custom or {}})


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("CANONICAL_CURRENCY", "EXCHANGE_RATE_URL", "ADMIN_API_KEY", "ANONYMOUS_CART_TTL_DAYS"):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_custom_table():
    assert load_settings(SimpleNamespace(config={})) == Settings()


def test_custom_values_are_read():
    settings = load_settings(
        _domain({"CANONICAL_CURRENCY": "usd", "ANONYMOUS_CART_TTL_DAYS": 7, "EXCHANGE_RATE_URL": "https://rates"})
    )

    assert settings.canonical_currency == "USD"
    assert settings.anonymous_cart_ttl_days == 7
    assert settings.exchange_rate_url == "https://rates"


def test_environment_wins(monkeypatch):
    monkeypatch.setenv("ANONYMOUS_CART_TTL_DAYS", "14")
    monkeypatch.setenv("ADMIN_API_KEY", "secret")

    settings = load_settings(_domain({"ANONYMOUS_CART_TTL_DAYS": 7}))

    assert settings.anonymous_cart_ttl_days == 14
    assert settings.admin_api_key == "secret"


def test_blank_environment_value_is_ignored(monkeypatch):
    monkeypatch.setenv("ANONYMOUS_CART_TTL_DAYS", "  ")
    assert load_settings(_domain({"ANONYMOUS_CART_TTL_DAYS": 7})).anonymous_cart_ttl_days == 7
