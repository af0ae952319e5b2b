"""Turning quote items into priced cart lines.

Each quote item is parsed into a custom product spec and priced with the
regular pricer. When the admin quoted a total, that total is split across
the items in proportion to their computed prices (by quantity when every
computed price is zero); the last item absorbs the rounding remainder so
the shares add up to the quoted total.
"""

import json
from dataclasses import dataclass

from pricing.custom_product.pricer import CustomProductPricer
from pricing.custom_product.specs import parse_spec, spec_to_dict


@dataclass(frozen=True)
class QuotedLine:
    custom_category: str
    custom_spec: str
    title: str
    image: str
    quantity: int
    base_price: float
    offer_price: float


def quote_item_spec(item_type: str, category_name: str | None, specifications: dict, quantity: int):
    """Spec for a quote item; the category name stands in for a missing product type."""
    options = {"categoryName": category_name, **(specifications or {})}
    return parse_spec(item_type, options, quantity)


def allocate(total: float, weights: list[float]) -> list[float]:
    if not weights:
        return []
    weight_sum = sum(weights)
    if weight_sum <= 0:
        weights = [1.0] * len(weights)
        weight_sum = float(len(weights))

    shares = [round(total * weight / weight_sum, 2) for weight in weights[:-1]]
    shares.append(max(round(total - sum(shares), 2), 0.0))
    return shares


def price_quote_items(items, quoted_price: float | None, pricer: CustomProductPricer) -> list[QuotedLine]:
    """Priced cart lines for `items` (QuoteItem entities), honouring an admin total."""
    specs = [quote_item_spec(i.item_type, i.category_name, i.options, i.quantity) for i in items]
    priced = [pricer.price(spec) for spec in specs]
    computed = [p.amount.amount for p in priced]

    if quoted_price is None:
        offers = computed
    else:
        weights = computed if any(computed) else [float(i.quantity) for i in items]
        offers = allocate(quoted_price, weights)

    return [
        QuotedLine(
            custom_category=spec.category.value,
            custom_spec=json.dumps(spec_to_dict(spec)),
            title=result.title,
            image=result.image,
            quantity=spec.quantity,
            base_price=max(result.amount.amount, offer),
            offer_price=offer,
        )
        for spec, result, offer in zip(specs, priced, offers)
    ]
