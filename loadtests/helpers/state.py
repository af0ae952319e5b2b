"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; no cross-user sharing.
State tracks ids returned by creation endpoints so follow-up operations
can reference them. The guest cookie lives in the client's cookie jar.
"""

from dataclasses import dataclass, field


@dataclass
class CartState:
    """Tracks state for a single shopping cart journey."""

    user_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
    quantities: dict[str, int] = field(default_factory=dict)


@dataclass
class QuoteState:
    """Tracks state for a single quote request lifecycle."""

    user_id: str | None = None
    quote_id: str | None = None
    current_status: str = "PENDING"
    cart_item_ids: list[str] = field(default_factory=list)
