"""Ordering bounded context: shopping carts and quote requests.

Resolves which cart a request belongs to (signed-in user or anonymous
token), merges anonymous carts on sign-in, and drives quote requests from
submission through admin pricing to acceptance into the buyer's cart.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
