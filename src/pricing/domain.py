"""Pricing bounded context: custom product pricing, currency and shipping.

Prices every spec-driven custom product (fasteners, connectors, wires) from
its options, converts canonical amounts into display currencies over a
periodically refreshed rate snapshot, and computes per-country shipping fees.
"""

import structlog
from protean.domain import Domain

pricing = Domain(name="pricing")

logger = structlog.get_logger(__name__)
