"""Cart lookup and presentation.

``load_or_create_cart`` is the only way a cart comes into existence; since the
cart id is the customer id, repeated calls always land on the same cart.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart
from commerce.catalogue.lookup import find_product
from commerce.pricing.calculator import PricedLine, calculate_totals


def load_or_create_cart(customer_id):
    """Return the customer's cart, creating (but not persisting) a fresh one if needed."""
    try:
        return current_domain.repository_for(ShoppingCart).get(str(customer_id))
    except ObjectNotFoundError:
        return ShoppingCart.create(customer_id=customer_id)


def get_cart(customer_id):
    """Return the customer's cart, persisting a new empty one on first access."""
    repo = current_domain.repository_for(ShoppingCart)
    try:
        return repo.get(str(customer_id))
    except ObjectNotFoundError:
        cart = ShoppingCart.create(customer_id=customer_id)
        repo.add(cart)
        return cart


def priced_lines(cart):
    """Price every line at the product's current price.

    Products that are gone or inactive are priced at zero and flagged
    unavailable so that the cart still renders.
    """
    lines = []
    for item in cart.items:
        product = find_product(item.product_id)
        lines.append(
            {
                "product_id": str(item.product_id),
                "name": product.name if product else None,
                "quantity": item.quantity,
                "unit_price": product.price if product else 0.0,
                "stock": product.stock if product else 0,
                "available": product is not None,
            }
        )
    return lines


def cart_subtotal(cart):
    return calculate_totals(PricedLine(line["unit_price"], line["quantity"]) for line in priced_lines(cart)).subtotal


def cart_summary(cart):
    """Cart payload: lines, applied coupon and live totals."""
    lines = priced_lines(cart)
    totals = calculate_totals(
        [PricedLine(line["unit_price"], line["quantity"]) for line in lines],
        discount_percentage=cart.coupon.discount_percentage if cart.coupon else None,
    )

    coupon = None
    if cart.coupon:
        coupon = {
            "code": cart.coupon.code,
            "discount_percentage": cart.coupon.discount_percentage,
            "expiry_date": cart.coupon.expiry_date,
        }

    return {
        "customer_id": str(cart.customer_id),
        "items": lines,
        "coupon": coupon,
        "totals": totals.rounded().to_dict(),
    }
