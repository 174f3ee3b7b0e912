"""Shared BDD fixtures and step definitions for the commerce engine."""

import pytest
from commerce.cart.coupons import ApplyCouponToCart
from commerce.cart.items import AddToCart
from commerce.cart.management import cart_summary, get_cart
from commerce.coupon.lookup import find_coupon_by_code
from commerce.coupon.management import DeactivateCoupon
from commerce.coupon.redemption import get_redemption_ledger
from commerce.inventory import get_inventory_ledger
from commerce.order.creation import place_order
from commerce.order.fulfillment import DeliverOrder, MarkOrderProcessing, ShipOrder
from commerce.order.queries import orders_for_customer
from protean import current_domain
from pytest_bdd import given, parsers, then

SHIPPING_ADDRESS = {
    "address": "1 Main St",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Product ids registered by the scenario, keyed by name."""
    return {}


@pytest.fixture()
def error():
    """Container for the exception a When step ran into."""
    return {"exc": None}


@pytest.fixture()
def checkout():
    """Place an order for everything in a customer's cart."""

    def _checkout(customer):
        return place_order(customer_id=customer, shipping_address=SHIPPING_ADDRESS, payment_method="PayPal")

    return _checkout


def latest_order(customer):
    orders = orders_for_customer(customer)
    assert orders, f"customer {customer} has no orders"
    return orders[0]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price:g} with {stock:d} units in stock'))
def _(products, register_product, name, price, stock):
    products[name] = register_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('a coupon "{code}" for {percentage:d}% off with a usage limit of {limit:d}'))
def _(create_coupon, code, percentage, limit):
    create_coupon(code=code, discount_percentage=percentage, usage_limit=limit)


@given(parsers.cfparse('a coupon "{code}" for {percentage:d}% off with a minimum purchase of {minimum:g}'))
def _(create_coupon, code, percentage, minimum):
    create_coupon(code=code, discount_percentage=percentage, min_purchase=minimum)


@given(parsers.cfparse('a coupon "{code}" for {percentage:d}% off that has been deactivated'))
def _(create_coupon, code, percentage):
    coupon_id = create_coupon(code=code, discount_percentage=percentage)
    current_domain.process(DeactivateCoupon(coupon_id=coupon_id), asynchronous=False)


@given(parsers.cfparse('customer "{customer}" has {quantity:d} of "{name}" in the cart'))
def _(products, customer, quantity, name):
    current_domain.process(
        AddToCart(customer_id=customer, product_id=products[name], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('customer "{customer}" has applied coupon "{code}"'))
def _(customer, code):
    current_domain.process(ApplyCouponToCart(customer_id=customer, coupon_code=code), asynchronous=False)


@given(parsers.cfparse('customer "{customer}" has placed an order'))
def _(checkout, customer):
    checkout(customer)


@given(parsers.cfparse('the order of customer "{customer}" has been shipped'))
def _(customer):
    order_id = str(latest_order(customer).id)
    current_domain.process(MarkOrderProcessing(order_id=order_id), asynchronous=False)
    current_domain.process(ShipOrder(order_id=order_id), asynchronous=False)


@given(parsers.cfparse('the order of customer "{customer}" has been delivered'))
def _(customer):
    order_id = str(latest_order(customer).id)
    for command in (MarkOrderProcessing, ShipOrder, DeliverOrder):
        current_domain.process(command(order_id=order_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is rejected because "{reason}"'))
def _(error, reason):
    exc = error["exc"]
    assert exc is not None, "expected the request to fail"
    assert reason in (getattr(exc, "reason", None) or str(getattr(exc, "messages", exc)))


@then(parsers.cfparse('"{name}" has {stock:d} units in stock and {sales:d} sold'))
def _(products, name, stock, sales):
    level = get_inventory_ledger().level(products[name])
    assert (level.stock, level.total_sales) == (stock, sales)


@then(parsers.cfparse('customer "{customer}" has an order totalling {total:g}'))
def _(customer, total):
    assert latest_order(customer).pricing.total_price == pytest.approx(total)


@then(parsers.cfparse('customer "{customer}" has no orders'))
def _(customer):
    assert orders_for_customer(customer) == []


@then(parsers.cfparse('the order of customer "{customer}" is "{status}"'))
def _(customer, status):
    assert latest_order(customer).status == status


@then(parsers.cfparse('the cart of customer "{customer}" is empty'))
def _(customer):
    assert get_cart(customer).is_empty


@then(parsers.cfparse('the cart of customer "{customer}" totals {total:g}'))
def _(customer, total):
    assert cart_summary(get_cart(customer))["totals"]["total"] == pytest.approx(total)


@then(parsers.cfparse('the cart of customer "{customer}" has coupon "{code}"'))
def _(customer, code):
    cart = get_cart(customer)
    assert cart.coupon is not None
    assert cart.coupon.code == code


@then(parsers.cfparse('the cart of customer "{customer}" has no coupon'))
def _(customer):
    assert get_cart(customer).coupon is None


@then(parsers.cfparse('coupon "{code}" has been used {count:d} times'))
def _(code, count):
    coupon = find_coupon_by_code(code)
    assert get_redemption_ledger().usage_count(str(coupon.id)) == count
