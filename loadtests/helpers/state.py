"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. State holds the ids returned
by earlier requests so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated customer from browsing to checkout."""

    customer_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    coupon_code: str | None = None
    order_id: str | None = None
    order_total: float = 0.0


@dataclass
class OrderState:
    """Tracks an order through payment and fulfilment."""

    order_id: str | None = None
    customer_id: str | None = None
    current_status: str = "pending"
    is_paid: bool = False
