"""Repository for the ShippingRate aggregate."""

from pricing.domain import pricing
from pricing.shipping.rate import ShippingRate


@pricing.repository(part_of=ShippingRate)
class ShippingRateRepository:
    def find_by_country_code(self, country_code: str) -> ShippingRate | None:
        results = self._dao.query.filter(country_code=country_code).all().items
        return results[0] if results else None

    def all_by_country_name(self) -> list[ShippingRate]:
        return sorted(self._dao.query.all().items, key=lambda rate: rate.country_name)
