"""Application tests for cart commands."""

import pytest
from commerce.cart.cart import ShoppingCart
from commerce.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from commerce.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from commerce.cart.management import cart_summary, get_cart
from commerce.catalogue.registration import ChangeProductPrice, DiscontinueProduct
from commerce.coupon.redemption import get_redemption_ledger
from commerce.coupon.validator import INACTIVE
from commerce.exceptions import CouponRejectedError, InsufficientStockError
from commerce.inventory import get_inventory_ledger
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

CUSTOMER = "cust-001"


def _add(product_id, quantity, customer_id=CUSTOMER):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


def _cart(customer_id=CUSTOMER):
    return current_domain.repository_for(ShoppingCart).get(customer_id)


class TestGetOrCreate:
    def test_first_access_creates_empty_cart(self):
        cart = get_cart(CUSTOMER)
        assert cart.is_empty
        assert str(_cart().id) == CUSTOMER

    def test_repeated_access_returns_same_cart(self, register_product):
        product_id = register_product()
        _add(product_id, 1)
        assert len(get_cart(CUSTOMER).items) == 1
        assert len(get_cart(CUSTOMER).items) == 1


class TestAddToCart:
    def test_add_creates_cart_lazily(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 2)
        assert _cart().items[0].quantity == 2

    def test_add_merges_lines(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 2)
        _add(product_id, 3)
        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_merged_quantity_over_stock_rejected(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 4)
        with pytest.raises(InsufficientStockError) as exc:
            _add(product_id, 2)
        assert exc.value.available == 5
        assert _cart().items[0].quantity == 4

    def test_unknown_product_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            _add("nope", 1)

    def test_inactive_product_not_found(self, register_product):
        product_id = register_product()
        current_domain.process(DiscontinueProduct(product_id=product_id), asynchronous=False)
        with pytest.raises(ObjectNotFoundError):
            _add(product_id, 1)

    def test_cart_reads_never_reserve_stock(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 3)
        cart_summary(get_cart(CUSTOMER))
        assert get_inventory_ledger().level(product_id).stock == 5


class TestUpdateRemoveClear:
    def test_update_quantity(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 1)
        current_domain.process(
            UpdateCartQuantity(customer_id=CUSTOMER, product_id=product_id, new_quantity=5),
            asynchronous=False,
        )
        assert _cart().items[0].quantity == 5

    def test_update_missing_line_not_found(self, register_product):
        product_id = register_product()
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                UpdateCartQuantity(customer_id=CUSTOMER, product_id=product_id, new_quantity=1),
                asynchronous=False,
            )

    def test_remove_item(self, register_product):
        product_id = register_product()
        _add(product_id, 1)
        current_domain.process(RemoveFromCart(customer_id=CUSTOMER, product_id=product_id), asynchronous=False)
        assert _cart().is_empty

    def test_clear(self, register_product, create_coupon):
        product_id = register_product()
        create_coupon()
        _add(product_id, 1)
        current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="save10"), asynchronous=False)
        current_domain.process(ClearCart(customer_id=CUSTOMER), asynchronous=False)
        cart = _cart()
        assert cart.is_empty
        assert cart.coupon is None


class TestCartCoupons:
    def test_apply_is_case_insensitive_and_does_not_count_usage(self, register_product, create_coupon):
        product_id = register_product()
        coupon_id = create_coupon(code="SAVE10", usage_limit=1)
        _add(product_id, 2)
        current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="save10"), asynchronous=False)
        assert _cart().coupon.code == "SAVE10"
        assert get_redemption_ledger().usage_count(coupon_id) == 0

    def test_unknown_code_not_found(self, register_product):
        _add(register_product(), 1)
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="NOPE"), asynchronous=False)

    def test_inactive_coupon_reports_inactive(self, register_product, create_coupon):
        _add(register_product(), 1)
        create_coupon(code="OFF", is_active=False)
        with pytest.raises(CouponRejectedError) as exc:
            current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="OFF"), asynchronous=False)
        assert exc.value.reason == INACTIVE

    def test_minimum_purchase_uses_live_subtotal(self, register_product, create_coupon):
        _add(register_product(price=20.0), 1)
        create_coupon(code="BIG", min_purchase=30.0)
        with pytest.raises(CouponRejectedError) as exc:
            current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="BIG"), asynchronous=False)
        assert exc.value.reason == "Minimum purchase of 30.00 required"

    def test_remove_coupon(self, register_product, create_coupon):
        _add(register_product(), 1)
        create_coupon()
        current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="SAVE10"), asynchronous=False)
        current_domain.process(RemoveCouponFromCart(customer_id=CUSTOMER), asynchronous=False)
        assert _cart().coupon is None


class TestCartSummary:
    def test_concrete_totals_without_and_with_coupon(self, register_product, create_coupon):
        product_id = register_product(price=20.0, stock=5)
        create_coupon(code="TENOFF", discount_percentage=10, min_purchase=30.0)
        _add(product_id, 2)

        summary = cart_summary(get_cart(CUSTOMER))
        assert summary["coupon"] is None
        assert summary["totals"] == {"subtotal": 40.0, "discount": 0.0, "shipping": 9.99, "tax": 3.2, "total": 53.19}

        current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="TENOFF"), asynchronous=False)
        summary = cart_summary(get_cart(CUSTOMER))
        assert summary["coupon"]["code"] == "TENOFF"
        assert summary["totals"] == {"subtotal": 40.0, "discount": 4.0, "shipping": 9.99, "tax": 2.88, "total": 48.87}

    def test_apply_then_remove_restores_totals(self, register_product, create_coupon):
        _add(register_product(price=20.0), 2)
        create_coupon()
        before = cart_summary(get_cart(CUSTOMER))["totals"]
        current_domain.process(ApplyCouponToCart(customer_id=CUSTOMER, coupon_code="SAVE10"), asynchronous=False)
        current_domain.process(RemoveCouponFromCart(customer_id=CUSTOMER), asynchronous=False)
        assert cart_summary(get_cart(CUSTOMER))["totals"] == before

    def test_totals_follow_live_prices(self, register_product):
        product_id = register_product(price=20.0)
        _add(product_id, 1)
        current_domain.process(ChangeProductPrice(product_id=product_id, new_price=25.0), asynchronous=False)
        assert cart_summary(get_cart(CUSTOMER))["totals"]["subtotal"] == 25.0

    def test_unavailable_product_priced_at_zero(self, register_product):
        product_id = register_product(price=20.0)
        _add(product_id, 1)
        current_domain.process(DiscontinueProduct(product_id=product_id), asynchronous=False)
        summary = cart_summary(get_cart(CUSTOMER))
        assert summary["items"][0]["available"] is False
        assert summary["items"][0]["unit_price"] == 0.0
        assert summary["totals"]["subtotal"] == 0.0
