"""Coupon validation rules.

Checks run in a fixed order and the first failing check decides the reason,
so an inactive coupon that has also expired is reported as inactive:

    1. active flag
    2. start date reached
    3. expiry date not passed
    4. usage limit not exhausted
    5. minimum purchase met

Validation never changes a coupon. Usage is counted by the redemption ledger
when an order is placed.
"""

from dataclasses import dataclass
from datetime import datetime

from commerce.utils.clock import as_utc, utcnow

INACTIVE = "Coupon is inactive"
NOT_YET_ACTIVE = "Coupon is not yet active"
EXPIRED = "Coupon has expired"
USAGE_LIMIT_EXCEEDED = "Coupon usage limit exceeded"


@dataclass(frozen=True)
class CouponTerms:
    """The parts of a coupon that decide whether it may be used."""

    code: str
    discount_percentage: float
    is_active: bool
    start_date: datetime
    expiry_date: datetime
    min_purchase: float = 0.0
    usage_limit: int | None = None
    usage_count: int = 0
    coupon_id: str | None = None


@dataclass(frozen=True)
class CouponCheck:
    valid: bool
    reason: str | None = None


def validate_coupon(terms: CouponTerms, order_amount: float, now: datetime | None = None) -> CouponCheck:
    """Decide whether ``terms`` can discount an order of ``order_amount`` at ``now``."""
    now = as_utc(now) or utcnow()

    if not terms.is_active:
        return CouponCheck(valid=False, reason=INACTIVE)

    if terms.start_date is not None and now < as_utc(terms.start_date):
        return CouponCheck(valid=False, reason=NOT_YET_ACTIVE)

    if now > as_utc(terms.expiry_date):
        return CouponCheck(valid=False, reason=EXPIRED)

    if terms.usage_limit is not None and terms.usage_count >= terms.usage_limit:
        return CouponCheck(valid=False, reason=USAGE_LIMIT_EXCEEDED)

    min_purchase = terms.min_purchase or 0.0
    if order_amount < min_purchase:
        return CouponCheck(valid=False, reason=f"Minimum purchase of {min_purchase:.2f} required")

    return CouponCheck(valid=True)
