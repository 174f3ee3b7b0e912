"""Coupon aggregate — a named, time-bounded, usage-limited percentage discount.

Codes are case-insensitive and stored upper-case. The usage count is not a
field of the aggregate: it is owned by the redemption ledger, which increments
it atomically when an order is placed with the coupon. The ledger keys it by
coupon id, so renaming a coupon keeps its count.
"""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from commerce.coupon.events import CouponCreated, CouponDeactivated, CouponUpdated
from commerce.coupon.validator import CouponTerms
from commerce.domain import commerce
from commerce.utils.clock import as_utc, utcnow

_UPDATABLE_FIELDS = (
    "code",
    "description",
    "discount_percentage",
    "min_purchase",
    "is_active",
    "start_date",
    "expiry_date",
    "usage_limit",
)


def normalize_code(code):
    """Canonical form of a coupon code: trimmed and upper-cased."""
    return (code or "").strip().upper()


@commerce.aggregate
class Coupon:
    code = String(required=True, max_length=50)
    description = Text()
    discount_percentage = Float(required=True)
    min_purchase = Float(default=0.0)
    is_active = Boolean(default=True)
    start_date = DateTime()
    expiry_date = DateTime(required=True)
    usage_limit = Integer()  # None means unlimited
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_percentage_must_be_between_1_and_99(self):
        if self.discount_percentage is not None and not 1 <= self.discount_percentage <= 99:
            raise ValidationError({"discount_percentage": ["Discount must be between 1% and 99%"]})

    @invariant.post
    def min_purchase_cannot_be_negative(self):
        if self.min_purchase is not None and self.min_purchase < 0:
            raise ValidationError({"min_purchase": ["Minimum purchase cannot be negative"]})

    @invariant.post
    def usage_limit_cannot_be_negative(self):
        if self.usage_limit is not None and self.usage_limit < 0:
            raise ValidationError({"usage_limit": ["Usage limit cannot be negative"]})

    @invariant.post
    def expiry_must_follow_start(self):
        if self.start_date and self.expiry_date and as_utc(self.expiry_date) <= as_utc(self.start_date):
            raise ValidationError({"expiry_date": ["Expiry date must be after the start date"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_percentage,
        expiry_date,
        description=None,
        min_purchase=0.0,
        is_active=True,
        start_date=None,
        usage_limit=None,
    ):
        now = utcnow()
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError({"code": ["Please add a coupon code"]})

        coupon = cls(
            code=normalized,
            description=description,
            discount_percentage=discount_percentage,
            min_purchase=min_purchase if min_purchase is not None else 0.0,
            is_active=is_active,
            start_date=start_date or now,
            expiry_date=expiry_date,
            usage_limit=usage_limit,
            created_at=now,
            updated_at=now,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                discount_percentage=coupon.discount_percentage,
                expiry_date=coupon.expiry_date,
                usage_limit=coupon.usage_limit,
            )
        )
        return coupon

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def update(self, **changes):
        """Change coupon terms. Unknown fields are rejected."""
        unknown = set(changes) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError({field: ["Field cannot be updated"] for field in sorted(unknown)})

        if "code" in changes:
            changes["code"] = normalize_code(changes["code"])
            if not changes["code"]:
                raise ValidationError({"code": ["Please add a coupon code"]})

        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)
            self.updated_at = utcnow()

        self.raise_(CouponUpdated(coupon_id=str(self.id), code=self.code))

    def deactivate(self):
        if not self.is_active:
            return

        self.is_active = False
        self.updated_at = utcnow()
        self.raise_(CouponDeactivated(coupon_id=str(self.id), code=self.code))

    # -------------------------------------------------------------------
    # Validation input
    # -------------------------------------------------------------------
    def terms(self, usage_count=0):
        """Freeze the coupon into the shape the validator checks."""
        return CouponTerms(
            code=self.code,
            discount_percentage=self.discount_percentage,
            is_active=bool(self.is_active),
            start_date=self.start_date,
            expiry_date=self.expiry_date,
            min_purchase=self.min_purchase or 0.0,
            usage_limit=self.usage_limit,
            usage_count=usage_count,
            coupon_id=str(self.id),
        )
