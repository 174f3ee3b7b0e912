"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from commerce.domain import commerce


@commerce.event(part_of="Coupon")
class CouponCreated:
    """A new discount coupon was issued."""

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_percentage = Float(required=True)
    expiry_date = DateTime(required=True)
    usage_limit = Integer()


@commerce.event(part_of="Coupon")
class CouponUpdated:
    """Coupon terms were changed by an administrator."""

    coupon_id = Identifier(required=True)
    code = String(required=True)


@commerce.event(part_of="Coupon")
class CouponDeactivated:
    """A coupon was switched off and can no longer be applied."""

    coupon_id = Identifier(required=True)
    code = String(required=True)
