"""ShippingRate aggregate: flat fee per destination country."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, String

from pricing.domain import pricing


@pricing.aggregate
class ShippingRate:
    country_code = String(required=True, max_length=2, unique=True)
    country_name = String(required=True, max_length=100)
    base_rate = Float(required=True, min_value=0.0)
    free_shipping_threshold = Float(min_value=0.0)  # Empty: never free
    updated_at = DateTime()

    @invariant.post
    def country_code_must_be_upper_alpha(self):
        code = self.country_code or ""
        if len(code) != 2 or not code.isalpha() or code != code.upper():
            raise ValidationError({"country_code": ["Country code must be two upper-case letters"]})

    def qualifies_for_free_shipping(self, subtotal: float) -> bool:
        # Zero or unset threshold means the destination never ships free
        if not self.free_shipping_threshold:
            return False
        return subtotal >= self.free_shipping_threshold
