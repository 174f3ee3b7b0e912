"""Commerce-specific exceptions.

Validation problems use Protean's ``ValidationError`` and missing records use
``ObjectNotFoundError``. The classes below cover business-rule conflicts and
authorization failures so that callers can tell them apart.
"""

from protean.exceptions import InvalidOperationError


class InsufficientStockError(InvalidOperationError):
    """Requested quantity exceeds the stock a product has available."""

    def __init__(self, product_id, requested, available):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for product {product_id}: {available} available, {requested} requested")


class CouponRejectedError(InvalidOperationError):
    """A coupon failed validation or could not be redeemed."""

    def __init__(self, code, reason):
        self.code = code
        self.reason = reason
        super().__init__(reason)


class OrderTransitionError(InvalidOperationError):
    """An order status change is not allowed from the current status."""


class NotAuthorizedError(Exception):
    """The acting user may not operate on the requested record."""


class UsageLimitReachedError(InvalidOperationError):
    """A coupon's redemption ledger has no uses left under its limit."""

    def __init__(self, coupon_id, usage_limit):
        self.coupon_id = str(coupon_id)
        self.usage_limit = usage_limit
        super().__init__(f"Coupon {coupon_id} has reached its usage limit of {usage_limit}")
