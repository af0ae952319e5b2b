"""Shipping rate seeding: upsert the rate table from catalogue data."""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Text
from protean.utils.globals import current_domain

from pricing.domain import pricing
from pricing.shipping.rate import ShippingRate

logger = structlog.get_logger(__name__)


@pricing.command(part_of="ShippingRate")
class SeedShippingRates:
    """Insert or update shipping rates keyed by country code."""

    rates = Text(required=True)  # JSON: list of {country_code, country_name, base_rate, free_shipping_threshold}


def _normalise_row(row: dict) -> dict:
    code = str(row.get("country_code") or row.get("countryCode") or "").strip().upper()
    if not code:
        raise ValidationError({"country_code": ["Country code is required"]})
    threshold = row.get("free_shipping_threshold", row.get("freeShippingThreshold"))
    return {
        "country_code": code,
        "country_name": row.get("country_name") or row.get("countryName"),
        "base_rate": row.get("base_rate", row.get("baseRate")),
        "free_shipping_threshold": threshold,
    }


@pricing.command_handler(part_of=ShippingRate)
class SeedShippingRatesHandler:
    @handle(SeedShippingRates)
    def seed_shipping_rates(self, command):
        rows = json.loads(command.rates) if isinstance(command.rates, str) else command.rates
        repo = current_domain.repository_for(ShippingRate)
        now = datetime.now(UTC)

        created = updated = 0
        for row in rows:
            values = _normalise_row(row)
            existing = repo.find_by_country_code(values["country_code"])
            if existing is None:
                repo.add(ShippingRate(updated_at=now, **values))
                created += 1
            else:
                existing.country_name = values["country_name"]
                existing.base_rate = values["base_rate"]
                existing.free_shipping_threshold = values["free_shipping_threshold"]
                existing.updated_at = now
                repo.add(existing)
                updated += 1

        logger.info("shipping_rates_seeded", created=created, updated=updated)
        return {"created": created, "updated": updated}
