"""Runtime settings for the pricing engine.

Values come from the ``[custom]`` table of ``domain.toml`` (selected per
``PROTEAN_ENV``) and can be overridden by environment variables of the same
name.
"""

import os
from dataclasses import dataclass

from protean.domain import Domain


def _lookup(custom: dict, key: str, default):
    value = os.getenv(key)
    if value is not None and str(value).strip() != "":
        return value.strip()
    value = custom.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class Settings:
    canonical_currency: str = "INR"
    exchange_rate_url: str = ""
    exchange_rate_timeout_seconds: float = 5.0
    exchange_rate_max_age_seconds: int = 3600
    exchange_rate_retry_after_seconds: float = 30.0
    notifier_timeout_seconds: float = 10.0
    admin_email: str = "admin@example.com"
    admin_api_key: str = ""
    anonymous_cart_ttl_days: int = 30


def load_settings(domain: Domain) -> Settings:
    """Read settings for `domain`, letting environment variables win."""
    custom = domain.config.get("custom", {}) or {}
    defaults = Settings()

    return Settings(
        canonical_currency=str(_lookup(custom, "CANONICAL_CURRENCY", defaults.canonical_currency)).upper(),
        exchange_rate_url=str(_lookup(custom, "EXCHANGE_RATE_URL", defaults.exchange_rate_url)),
        exchange_rate_timeout_seconds=float(
            _lookup(custom, "EXCHANGE_RATE_TIMEOUT_SECONDS", defaults.exchange_rate_timeout_seconds)
        ),
        exchange_rate_max_age_seconds=int(
            _lookup(custom, "EXCHANGE_RATE_MAX_AGE_SECONDS", defaults.exchange_rate_max_age_seconds)
        ),
        exchange_rate_retry_after_seconds=float(
            _lookup(custom, "EXCHANGE_RATE_RETRY_AFTER_SECONDS", defaults.exchange_rate_retry_after_seconds)
        ),
        notifier_timeout_seconds=float(_lookup(custom, "NOTIFIER_TIMEOUT_SECONDS", defaults.notifier_timeout_seconds)),
        admin_email=str(_lookup(custom, "ADMIN_EMAIL", defaults.admin_email)),
        admin_api_key=str(_lookup(custom, "ADMIN_API_KEY", defaults.admin_api_key)),
        anonymous_cart_ttl_days=int(_lookup(custom, "ANONYMOUS_CART_TTL_DAYS", defaults.anonymous_cart_ttl_days)),
    )
