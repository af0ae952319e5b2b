"""Custom product pricer: deterministic price and title for a product spec.

Price = (category base + option surcharges) x quantity, rounded to 2 places.
The pricer never performs I/O and holds no mutable state, so the same spec
always prices identically. Option values it does not recognise add nothing;
only a missing or unknown product family raises ``ValidationError``.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from pricing.custom_product import price_list
from pricing.custom_product.price_list import normalise
from pricing.custom_product.specs import ConnectorSpec, FastenerSpec, Money, WireSpec


@dataclass(frozen=True)
class PricedProduct:
    """Pricing outcome for one spec: display title, unit and total amounts."""

    title: str
    unit_amount: Money
    amount: Money
    image: str


def _to_number(value) -> float:
    """Leading numeric part of an option value ("10", "10mm", "1.5 m"); 0 when absent."""
    if value is None:
        return 0.0
    digits = ""
    for char in str(value).strip():
        if char.isdigit() or (char == "." and "." not in digits):
            digits += char
        else:
            break
    try:
        return float(digits) if digits else 0.0
    except ValueError:
        return 0.0


class CustomProductPricer:
    """Prices fastener, connector and wire specs from the price list."""

    def __init__(self, currency: str = "INR", fastener_surcharges: dict | None = None) -> None:
        self.currency = currency
        self._fastener_surcharges = (
            price_list.FASTENER_OPTION_SURCHARGES if fastener_surcharges is None else fastener_surcharges
        )

    def price(self, spec) -> PricedProduct:
        if isinstance(spec, FastenerSpec):
            unit = self._fastener_unit_price(spec)
        elif isinstance(spec, ConnectorSpec):
            unit = self._connector_unit_price(spec)
        elif isinstance(spec, WireSpec):
            unit = self._wire_unit_price(spec)
        else:
            raise ValidationError({"spec": [f"Cannot price {type(spec).__name__}"]})

        return PricedProduct(
            title=self.title(spec),
            unit_amount=Money(amount=round(unit, 2), currency=self.currency),
            amount=Money(amount=round(unit * spec.quantity, 2), currency=self.currency),
            image=self.image_for(spec),
        )

    # -------------------------------------------------------------------
    # Unit prices
    # -------------------------------------------------------------------
    @staticmethod
    def _fastener_key(spec: FastenerSpec) -> str:
        key = normalise(spec.fastener_type)
        if key not in price_list.FASTENER_BASE_PRICES and key.endswith("s"):
            key = key[:-1]
        if key not in price_list.FASTENER_BASE_PRICES:
            raise ValidationError({"fastener_type": [f"Unknown fastener type: {spec.fastener_type!r}"]})
        return key

    def _fastener_unit_price(self, spec: FastenerSpec) -> float:
        key = self._fastener_key(spec)
        unit = price_list.FASTENER_BASE_PRICES[key]

        for field_name, surcharges in self._fastener_surcharges.get(key, {}).items():
            unit += surcharges.get(normalise(getattr(spec, field_name, None)), 0.0)

        return unit

    def _connector_unit_price(self, spec: ConnectorSpec) -> float:
        unit = price_list.CONNECTOR_BASE_PRICE
        unit += price_list.CONNECTOR_TYPE_SURCHARGES.get(normalise(spec.connector_type), 0.0)
        unit += _to_number(spec.pins) * price_list.CONNECTOR_PRICE_PER_PIN
        return unit

    def _wire_unit_price(self, spec: WireSpec) -> float:
        key = normalise(spec.wire_type)
        unit = price_list.WIRE_BASE_PRICES[key]
        unit += price_list.WIRE_SIZE_SURCHARGES[key].get(normalise(spec.size), 0.0)
        unit += _to_number(spec.length) * price_list.WIRE_PRICE_PER_METRE[key]
        return unit

    # -------------------------------------------------------------------
    # Display projection
    # -------------------------------------------------------------------
    @staticmethod
    def title(spec) -> str:
        """Human-readable title: product family first, then populated options in a fixed order."""
        if isinstance(spec, FastenerSpec):
            parts = [
                spec.fastener_type,
                spec.size,
                spec.material,
                f"{spec.length}mm" if spec.length else None,
                spec.style,
                f"{spec.head_type} Head" if spec.head_type else None,
            ]
        elif isinstance(spec, ConnectorSpec):
            parts = [
                spec.connector_type,
                spec.style,
                f"{spec.pins} Pins" if spec.pins else None,
                spec.size,
            ]
        elif isinstance(spec, WireSpec):
            parts = [
                price_list.WIRE_TITLES.get(normalise(spec.wire_type), spec.wire_type),
                spec.size,
                spec.color,
                f"{spec.length}m" if spec.length else None,
            ]
        else:
            return "Custom Product"

        return " - ".join(part for part in parts if part)

    @staticmethod
    def image_for(spec) -> str:
        if isinstance(spec, FastenerSpec):
            key = normalise(spec.fastener_type)
            return price_list.FASTENER_IMAGES.get(key) or price_list.FASTENER_IMAGES.get(
                key[:-1], price_list.PLACEHOLDER_IMAGE
            )
        if isinstance(spec, ConnectorSpec):
            return price_list.CONNECTOR_IMAGE
        if isinstance(spec, WireSpec):
            return price_list.WIRE_IMAGES.get(normalise(spec.wire_type), price_list.PLACEHOLDER_IMAGE)
        return price_list.PLACEHOLDER_IMAGE
