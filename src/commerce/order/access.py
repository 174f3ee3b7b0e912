"""Who may act on an order.

Customers act on their own orders; admins act on any. The identity itself is
established upstream and arrives here as an ``Actor``.
"""

from dataclasses import dataclass

from commerce.exceptions import NotAuthorizedError

ADMIN = "admin"
CUSTOMER = "customer"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str = CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def actor_from(user_id, role):
    """Build an ``Actor`` from command fields. ``None`` means an internal caller."""
    if user_id is None and role is None:
        return None
    return Actor(user_id=str(user_id) if user_id is not None else "", role=role or CUSTOMER)


def ensure_can_access(order, actor):
    if actor is None or actor.is_admin:
        return
    if str(order.customer_id) != str(actor.user_id):
        raise NotAuthorizedError(f"Not authorized to access order {order.id}")


def ensure_admin(actor):
    if actor is not None and not actor.is_admin:
        raise NotAuthorizedError("Only administrators can perform this action")
