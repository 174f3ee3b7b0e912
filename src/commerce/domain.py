"""Commerce bounded context — carts, coupons, orders and stock.

Holds the transaction engine of the storefront: pricing a cart, validating
and applying coupons, and converting a cart into an order while keeping
inventory and coupon usage consistent.
"""

from protean.domain import Domain

from commerce.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
commerce = Domain(name="commerce")
