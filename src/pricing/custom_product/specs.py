"""Custom product specifications, one value object per product family.

A custom product has no catalogue id: it is fully described by its category
and the options the buyer picked. Each family gets its own value object with
an explicit field set, so fastener options never leak into wire pricing and a
new option only touches the family that owns it.

Specs are immutable. Once priced, the same spec always yields the same price.
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String, Text

from pricing.domain import pricing


class ProductCategory(Enum):
    FASTENER = "fastener"
    CONNECTOR = "connector"
    WIRE = "wire"


class WireType(Enum):
    SILICON = "Silicon Wires"
    HARNESS = "Harness Wires"


# Aliases accepted from storefront payloads (quote items send "fastener",
# cart payloads send "Connectors" / "Silicon Wires" etc.)
_CATEGORY_ALIASES = {
    "fastener": ProductCategory.FASTENER,
    "fasteners": ProductCategory.FASTENER,
    "connector": ProductCategory.CONNECTOR,
    "connectors": ProductCategory.CONNECTOR,
    "wire": ProductCategory.WIRE,
    "wires": ProductCategory.WIRE,
    "silicon wires": ProductCategory.WIRE,
    "harness wires": ProductCategory.WIRE,
}


@pricing.value_object
class Money:
    """An amount in a given currency. Stored amounts are always canonical."""

    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")


@pricing.value_object
class FastenerSpec:
    """Bolts, nuts, washers, screws, inserts, rev nuts and stand offs."""

    fastener_type = String(required=True, max_length=50)
    head_type = String(max_length=50)
    drive_type = String(max_length=50)
    style = String(max_length=50)  # "type" in storefront payloads (Hex, Jam, Flat, ...)
    feature = String(max_length=50)
    size = String(max_length=20)
    length = String(max_length=20)  # millimetres
    thread_length = String(max_length=20)  # millimetres
    material = String(max_length=50)
    coating = String(max_length=50)
    remarks = Text()
    quantity = Integer(required=True, min_value=1)

    @property
    def category(self) -> ProductCategory:
        return ProductCategory.FASTENER


@pricing.value_object
class ConnectorSpec:
    connector_type = String(required=True, max_length=100)
    style = String(max_length=50)
    pins = String(max_length=10)
    size = String(max_length=20)
    remarks = Text()
    quantity = Integer(required=True, min_value=1)

    @property
    def category(self) -> ProductCategory:
        return ProductCategory.CONNECTOR


@pricing.value_object
class WireSpec:
    wire_type = String(required=True, choices=WireType)
    size = String(max_length=20)
    color = String(max_length=30)
    length = String(max_length=20)  # metres
    remarks = Text()
    quantity = Integer(required=True, min_value=1)

    @property
    def category(self) -> ProductCategory:
        return ProductCategory.WIRE


# ---------------------------------------------------------------------------
# Option-bag <-> spec translation
# ---------------------------------------------------------------------------
# spec field -> storefront option keys, first match wins
_FIELD_KEYS = {
    FastenerSpec: {
        "fastener_type": ("fastenerType", "fastener_type", "categoryName"),
        "head_type": ("headType", "head_type"),
        "drive_type": ("driveType", "drive_type"),
        "style": ("type", "style"),
        "feature": ("feature",),
        "size": ("size",),
        "length": ("length",),
        "thread_length": ("threadLength", "thread_length"),
        "material": ("material",),
        "coating": ("coating",),
        "remarks": ("remarks",),
    },
    ConnectorSpec: {
        "connector_type": ("connectorType", "connector_type", "categoryName"),
        "style": ("type", "style"),
        "pins": ("pins",),
        "size": ("size",),
        "remarks": ("remarks",),
    },
    WireSpec: {
        "wire_type": ("productType", "wireType", "wire_type", "categoryName"),
        "size": ("size",),
        "color": ("color",),
        "length": ("length",),
        "remarks": ("remarks",),
    },
}

_SPEC_CLASSES = {
    ProductCategory.FASTENER: FastenerSpec,
    ProductCategory.CONNECTOR: ConnectorSpec,
    ProductCategory.WIRE: WireSpec,
}


def resolve_category(value: str | None) -> ProductCategory:
    """Map a storefront category label onto a product family."""
    key = (value or "").strip().lower()
    if key not in _CATEGORY_ALIASES:
        raise ValidationError({"category": [f"Unknown custom product category: {value!r}"]})
    return _CATEGORY_ALIASES[key]


def _normalise_wire_type(value) -> str | None:
    if value is None:
        return None
    key = str(value).strip().lower()
    if key.startswith("silicon"):
        return WireType.SILICON.value
    if key.startswith("harness"):
        return WireType.HARNESS.value
    return str(value)


def parse_spec(category: str, options: dict, quantity: int):
    """Build the typed spec for `category` from an untyped options bag.

    Unknown option keys are ignored; empty values are treated as absent.
    Raises ``ValidationError`` for an unknown category, a missing
    discriminator (fastener/connector/wire type) or a quantity below 1.
    """
    product_category = resolve_category(category)
    spec_cls = _SPEC_CLASSES[product_category]
    options = options or {}

    values = {}
    for field_name, keys in _FIELD_KEYS[spec_cls].items():
        for key in keys:
            raw = options.get(key)
            if raw is not None and str(raw).strip() != "":
                values[field_name] = str(raw).strip()
                break

    if product_category == ProductCategory.WIRE:
        values["wire_type"] = _normalise_wire_type(values.get("wire_type") or category)

    return spec_cls(quantity=quantity, **values)


def spec_options(spec) -> dict:
    """The populated options of `spec`, keyed by spec field name (quantity excluded)."""
    return {
        field_name: getattr(spec, field_name)
        for field_name in _FIELD_KEYS[type(spec)]
        if getattr(spec, field_name) is not None
    }


def spec_to_dict(spec) -> dict:
    """Serialise a spec for embedding in a cart or quote item."""
    return {
        "category": spec.category.value,
        "quantity": spec.quantity,
        "options": spec_options(spec),
    }


def spec_from_dict(data: dict):
    """Inverse of :func:`spec_to_dict`."""
    category = resolve_category(data.get("category"))
    spec_cls = _SPEC_CLASSES[category]
    return spec_cls(quantity=data["quantity"], **data.get("options", {}))
