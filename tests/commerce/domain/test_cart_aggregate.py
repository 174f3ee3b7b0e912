"""Tests for the ShoppingCart aggregate."""

from datetime import timedelta

import pytest
from commerce.cart.cart import ShoppingCart
from commerce.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from commerce.coupon.validator import EXPIRED, CouponTerms
from commerce.exceptions import CouponRejectedError, InsufficientStockError
from commerce.utils.clock import utcnow
from protean.exceptions import ObjectNotFoundError, ValidationError


def _make_cart():
    return ShoppingCart.create(customer_id="cust-001")


def _terms(**overrides):
    now = utcnow()
    values = {
        "code": "SAVE10",
        "discount_percentage": 10,
        "is_active": True,
        "start_date": now - timedelta(days=1),
        "expiry_date": now + timedelta(days=1),
    }
    values.update(overrides)
    return CouponTerms(**values)


class TestCreation:
    def test_cart_identity_is_customer_identity(self):
        cart = _make_cart()
        assert str(cart.id) == "cust-001"
        assert cart.is_empty
        assert cart.coupon is None


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2, available_stock=5)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_add_item_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].product_id == "prod-001"
        assert added[0].line_quantity == 1

    def test_same_product_merges_into_one_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        cart.add_item("prod-001", 2, available_stock=5)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_merged_quantity_checked_against_stock(self):
        cart = _make_cart()
        cart.add_item("prod-001", 4, available_stock=5)
        with pytest.raises(InsufficientStockError) as exc:
            cart.add_item("prod-001", 2, available_stock=5)
        assert exc.value.available == 5
        assert exc.value.requested == 6
        assert cart.items[0].quantity == 4

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_cart().add_item("prod-001", 0, available_stock=5)


class TestUpdateQuantity:
    def test_replaces_quantity(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        cart.update_item_quantity("prod-001", 4, available_stock=5)
        assert cart.items[0].quantity == 4
        updated = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert updated[0].previous_quantity == 1
        assert updated[0].new_quantity == 4

    def test_missing_line_is_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            _make_cart().update_item_quantity("prod-001", 1, available_stock=5)

    def test_quantity_above_stock_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        with pytest.raises(InsufficientStockError):
            cart.update_item_quantity("prod-001", 6, available_stock=5)

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        with pytest.raises(ValidationError):
            cart.update_item_quantity("prod-001", 0, available_stock=5)


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        cart.remove_item("prod-001")
        assert cart.is_empty
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_remove_absent_item_is_noop(self):
        cart = _make_cart()
        cart.remove_item("prod-404")
        assert not any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_clear_drops_lines_and_coupon(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1, available_stock=5)
        cart.add_item("prod-002", 1, available_stock=5)
        cart.apply_coupon(_terms(), subtotal=40.0)
        cart.clear(order_id="ord-1")
        assert cart.is_empty
        assert cart.coupon is None
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].order_id == "ord-1"


class TestCoupon:
    def test_apply_stores_snapshot(self):
        cart = _make_cart()
        cart.apply_coupon(_terms(), subtotal=40.0)
        assert cart.coupon.code == "SAVE10"
        assert cart.coupon.discount_percentage == 10
        assert any(isinstance(e, CartCouponApplied) for e in cart._events)

    def test_rejected_coupon_keeps_existing_snapshot(self):
        cart = _make_cart()
        cart.apply_coupon(_terms(), subtotal=40.0)
        with pytest.raises(CouponRejectedError) as exc:
            cart.apply_coupon(_terms(code="OLD", expiry_date=utcnow() - timedelta(days=1)), subtotal=40.0)
        assert exc.value.reason == EXPIRED
        assert cart.coupon.code == "SAVE10"

    def test_minimum_purchase_checked_against_subtotal(self):
        cart = _make_cart()
        with pytest.raises(CouponRejectedError) as exc:
            cart.apply_coupon(_terms(min_purchase=30.0), subtotal=20.0)
        assert exc.value.reason == "Minimum purchase of 30.00 required"
        assert cart.coupon is None

    def test_remove_coupon(self):
        cart = _make_cart()
        cart.apply_coupon(_terms(), subtotal=40.0)
        cart.remove_coupon()
        assert cart.coupon is None
        assert any(isinstance(e, CartCouponRemoved) for e in cart._events)

    def test_remove_coupon_without_one_is_noop(self):
        cart = _make_cart()
        cart.remove_coupon()
        assert not any(isinstance(e, CartCouponRemoved) for e in cart._events)
