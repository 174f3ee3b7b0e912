"""Pricing calculator — turns priced cart lines into order totals.

A pure function: the same lines, discount and policy always produce the same
totals, and nothing is read or written along the way.

    subtotal = sum(price * quantity)
    discount = subtotal * discount_percentage / 100   (0 without a coupon)
    shipping = 0 if subtotal > threshold else flat fee
    tax      = (subtotal - discount) * tax rate
    total    = subtotal - discount + shipping + tax

Shipping is decided on the pre-discount subtotal. Figures are kept unrounded
between steps; ``CartTotals.rounded()`` rounds to cents for presentation.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from protean.exceptions import ValidationError

from commerce.config import PricingPolicy, get_pricing_policy


@dataclass(frozen=True)
class PricedLine:
    """A unit price and the quantity bought at that price."""

    unit_price: float
    quantity: int


@dataclass(frozen=True)
class CartTotals:
    subtotal: float = 0.0
    discount: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    total: float = 0.0

    def rounded(self) -> "CartTotals":
        return CartTotals(
            subtotal=round(self.subtotal, 2),
            discount=round(self.discount, 2),
            shipping=round(self.shipping, 2),
            tax=round(self.tax, 2),
            total=round(self.total, 2),
        )

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
        }


def calculate_totals(
    lines: Iterable[PricedLine | tuple[float, int]],
    discount_percentage: float | None = None,
    policy: PricingPolicy | None = None,
) -> CartTotals:
    """Price a set of lines under the given (or active) pricing policy.

    Lines may be ``PricedLine`` instances or plain ``(unit_price, quantity)``
    tuples. Negative prices or quantities and discounts outside 0-100 are
    rejected with a ``ValidationError``.
    """
    policy = policy or get_pricing_policy()

    subtotal = 0.0
    for line in lines:
        unit_price, quantity = (line.unit_price, line.quantity) if isinstance(line, PricedLine) else line
        if unit_price < 0:
            raise ValidationError({"unit_price": ["Unit price cannot be negative"]})
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})
        subtotal += unit_price * quantity

    discount = 0.0
    if discount_percentage is not None:
        if not 0 <= discount_percentage <= 100:
            raise ValidationError({"discount_percentage": ["Discount percentage must be between 0 and 100"]})
        discount = subtotal * discount_percentage / 100

    shipping = 0.0 if subtotal > policy.free_shipping_threshold else policy.flat_shipping_fee
    tax = (subtotal - discount) * policy.tax_rate
    total = subtotal - discount + shipping + tax

    return CartTotals(
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        total=total,
    )
