"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from commerce.domain import commerce


@commerce.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its line grew."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@commerce.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was replaced."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@commerce.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A product line was removed from the cart."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@commerce.event(part_of="ShoppingCart")
class CartCleared:
    """All lines and the coupon were removed, either by the customer or at checkout."""

    cart_id = Identifier(required=True)
    order_id = Identifier()  # Set when the cart was cleared by a checkout


@commerce.event(part_of="ShoppingCart")
class CartCouponApplied:
    """A coupon passed validation and its terms were copied onto the cart."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount_percentage = Float(required=True)


@commerce.event(part_of="ShoppingCart")
class CartCouponRemoved:
    """The coupon snapshot was dropped from the cart."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
