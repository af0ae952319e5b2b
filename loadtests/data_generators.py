"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's validation rules
(custom product options the pricer knows, quantities within the cart caps)
and match the camelCase field names of the Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

FASTENER_TYPES = ["Bolt", "Nut", "Washer", "Brass Insert", "Rev Nuts", "Stand Offs", "Screw"]
FASTENER_SIZES = ["M2", "M3", "M4", "M5", "M6", "M8", "M10"]
FASTENER_MATERIALS = ["Steel", "Stainless Steel", "Brass", "Nylon"]
CONNECTOR_TYPES = ["Bullet Connectors", "Tyco Connectors", "Furukawa Connectors"]
SILICON_SIZES = ["8 AWG", "10 AWG", "12 AWG", "14 AWG"]
HARNESS_SIZES = ["22 AWG", "20 AWG", "17 AWG", "0.35 sq mm", "0.50 sq mm", "1 sq mm"]
WIRE_COLORS = ["Red", "Black", "Blue", "Yellow", "Green"]

SHIPPING_COUNTRIES = ["IN", "US"]
DISPLAY_CURRENCIES = ["INR", "USD", "EUR", "GBP"]


# ---------- Identity ----------


def user_id() -> str:
    """Signed-in user ids like 'LT-USER-a1b2c3d4'."""
    return f"LT-USER-{uuid.uuid4().hex[:8]}"


# ---------- Custom products ----------


def fastener_options() -> dict:
    return {
        "fastenerType": random.choice(FASTENER_TYPES),
        "size": random.choice(FASTENER_SIZES),
        "length": str(random.choice([6, 8, 10, 12, 16, 20, 25, 30])),
        "material": random.choice(FASTENER_MATERIALS),
    }


def connector_options() -> dict:
    return {
        "connectorType": random.choice(CONNECTOR_TYPES),
        "pins": str(random.randint(1, 12)),
    }


def wire_options() -> tuple[str, dict]:
    """Return (category, options); the category names the wire family."""
    if random.random() < 0.5:
        return "Silicon Wires", {
            "size": random.choice(SILICON_SIZES),
            "color": random.choice(WIRE_COLORS),
            "length": str(random.randint(1, 20)),
        }
    return "Harness Wires", {
        "size": random.choice(HARNESS_SIZES),
        "length": str(round(random.uniform(0.5, 10.0), 1)),
    }


def custom_cart_item(quantity: int | None = None) -> dict:
    """Generate an AddCartItemRequest payload for a random custom product."""
    family = random.choice(["fastener", "connector", "wire"])
    if family == "fastener":
        category, options = "fastener", fastener_options()
    elif family == "connector":
        category, options = "connector", connector_options()
    else:
        category, options = wire_options()

    return {
        "quantity": quantity or random.randint(1, 50),
        "customProduct": {"category": category, "options": options},
    }


# ---------- Quotes ----------


def quote_item() -> dict:
    """Generate one QuoteItemRequest for a fastener or connector."""
    if random.random() < 0.7:
        options = fastener_options()
        return {
            "type": "fastener",
            "categoryName": options.pop("fastenerType"),
            "specifications": options,
            "quantity": random.randint(10, 100),
        }
    options = connector_options()
    return {
        "type": "connector",
        "categoryName": options.pop("connectorType"),
        "specifications": options,
        "quantity": random.randint(5, 50),
    }


def quote_request_data(item_count: int | None = None) -> dict:
    """Generate a SubmitQuoteRequestBody payload."""
    count = item_count or random.randint(1, 4)
    return {
        "items": [quote_item() for _ in range(count)],
        "notes": fake.sentence(nb_words=10),
    }


def admin_quote_data() -> dict:
    return {
        "quotedPrice": round(random.uniform(100.0, 5000.0), 2),
        "adminResponse": fake.sentence(nb_words=8),
    }


# ---------- Pricing ----------


def shipping_request() -> dict:
    return {
        "countryCode": random.choice(SHIPPING_COUNTRIES),
        "orderTotal": round(random.uniform(0.0, 3000.0), 2),
    }


def display_currency() -> str:
    return random.choice(DISPLAY_CURRENCIES)
