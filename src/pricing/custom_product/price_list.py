"""Price list for custom products, in the canonical currency (INR).

Keys are normalised with :func:`normalise` (lower case, single spaces,
hyphens and underscores treated as spaces).
"""

# ---------------------------------------------------------------------------
# Fasteners: unit base price by type, option surcharges per type
# ---------------------------------------------------------------------------
FASTENER_BASE_PRICES = {
    "bolt": 0.50,
    "nut": 0.30,
    "washer": 0.15,
    "brass insert": 0.40,
    "rev nuts": 0.35,
    "stand offs": 0.45,
    "screw": 0.25,
}

# fastener type -> spec field -> option value -> surcharge per unit
FASTENER_OPTION_SURCHARGES: dict[str, dict[str, dict[str, float]]] = {}

FASTENER_IMAGES = {
    "bolt": "/images/fasteners/bolts.jpg",
    "nut": "/images/fasteners/nut.jpg",
    "washer": "/images/fasteners/washer.jpg",
    "brass insert": "/images/fasteners/brass-insert.png",
    "rev nuts": "/images/fasteners/rev-nuts.jpeg",
    "stand offs": "/images/fasteners/sand-offs.webp",
    "screw": "/images/fasteners/screw.jpg",
}

# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------
CONNECTOR_BASE_PRICE = 50.0

CONNECTOR_TYPE_SURCHARGES = {
    "bullet connectors": 20.0,
    "tyco connectors": 30.0,
    "furukawa connectors": 40.0,
}

CONNECTOR_PRICE_PER_PIN = 5.0

CONNECTOR_IMAGE = "/images/connectors/connector.jpg"

# ---------------------------------------------------------------------------
# Wires: base, gauge surcharge and per-metre price by wire type
# ---------------------------------------------------------------------------
WIRE_BASE_PRICES = {
    "silicon wires": 30.0,
    "harness wires": 25.0,
}

WIRE_SIZE_SURCHARGES = {
    "silicon wires": {
        "8 awg": 20.0,
        "10 awg": 15.0,
        "12 awg": 10.0,
        "14 awg": 5.0,
    },
    "harness wires": {
        "22 awg": 5.0,
        "20 awg": 10.0,
        "17 awg": 15.0,
        "0.35 sq mm": 5.0,
        "0.50 sq mm": 10.0,
        "1 sq mm": 15.0,
    },
}

WIRE_PRICE_PER_METRE = {
    "silicon wires": 2.0,
    "harness wires": 1.5,
}

WIRE_TITLES = {
    "silicon wires": "Silicon Wire",
    "harness wires": "Harness Wire",
}

WIRE_IMAGES = {
    "silicon wires": "/images/wires/silicon-wire.jpg",
    "harness wires": "/images/wires/harness-wire.jpg",
}

PLACEHOLDER_IMAGE = "/placeholder.svg"


def normalise(value) -> str:
    if value is None:
        return ""
    text = str(value).replace("-", " ").replace("_", " ")
    return " ".join(text.lower().split())
