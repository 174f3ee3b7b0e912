"""Stock and coupon bookkeeping for orders.

Every reservation and coupon claim is filed under the order id, so releasing
or revoking for the same order more than once has no further effect.
"""

import structlog

from commerce.coupon.redemption import get_redemption_ledger
from commerce.coupon.validator import USAGE_LIMIT_EXCEEDED
from commerce.exceptions import CouponRejectedError, InsufficientStockError, UsageLimitReachedError
from commerce.inventory import get_inventory_ledger

logger = structlog.get_logger(__name__)


def reserve_order_stock(order_id, lines):
    """Reserve stock for every ``(product_id, quantity)`` line.

    If any line cannot be reserved, the lines already reserved for this order
    are released before ``InsufficientStockError`` propagates.
    """
    ledger = get_inventory_ledger()
    reserved = []
    for product_id, quantity in lines:
        try:
            ledger.reserve(str(product_id), quantity, str(order_id))
        except InsufficientStockError as exc:
            logger.warning(
                "stock reservation failed",
                order_id=str(order_id),
                product_id=exc.product_id,
                requested=exc.requested,
                available=exc.available,
            )
            release_order_stock(order_id, reserved)
            raise
        except Exception:
            release_order_stock(order_id, reserved)
            raise
        reserved.append(str(product_id))
        logger.info("stock reserved", order_id=str(order_id), product_id=str(product_id), quantity=quantity)


def release_order_stock(order_id, product_ids):
    """Release this order's reservation on each product. Returns how many were released."""
    ledger = get_inventory_ledger()
    released = 0
    for product_id in product_ids:
        level = ledger.release(str(product_id), str(order_id))
        if level is not None:
            released += 1
            logger.info("stock released", order_id=str(order_id), product_id=str(product_id), stock=level.stock)
    return released


def claim_coupon(order_id, coupon):
    """Count one use of ``coupon`` against this order, within its usage limit."""
    try:
        count = get_redemption_ledger().claim(str(coupon.id), coupon.usage_limit, str(order_id))
    except UsageLimitReachedError:
        raise CouponRejectedError(coupon.code, USAGE_LIMIT_EXCEEDED) from None
    logger.info("coupon redeemed", order_id=str(order_id), code=coupon.code, usage_count=count)
    return count


def compensate_checkout(order_id, product_ids, coupon_id=None):
    """Undo whatever a failed checkout managed to reserve and claim."""
    released = release_order_stock(order_id, product_ids)
    revoked = bool(coupon_id) and get_redemption_ledger().revoke(str(coupon_id), str(order_id))
    if released or revoked:
        logger.warning(
            "checkout compensated",
            order_id=str(order_id),
            released_lines=released,
            coupon_revoked=revoked,
        )
