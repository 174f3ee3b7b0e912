"""Tests for the pricing calculator."""

import pytest
from commerce.config import PricingPolicy
from commerce.pricing.calculator import CartTotals, PricedLine, calculate_totals
from protean.exceptions import ValidationError


class TestSubtotal:
    def test_empty_cart_is_charged_shipping_only(self):
        totals = calculate_totals([])
        assert totals.subtotal == 0.0
        assert totals.discount == 0.0
        assert totals.shipping == pytest.approx(9.99)
        assert totals.tax == 0.0
        assert totals.total == pytest.approx(9.99)

    def test_subtotal_sums_price_times_quantity(self):
        totals = calculate_totals([PricedLine(20.0, 2), PricedLine(5.5, 3)])
        assert totals.subtotal == pytest.approx(56.5)

    def test_accepts_plain_tuples(self):
        totals = calculate_totals([(20.0, 2)])
        assert totals.subtotal == pytest.approx(40.0)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError) as exc:
            calculate_totals([PricedLine(-1.0, 1)])
        assert "unit_price" in exc.value.messages

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError) as exc:
            calculate_totals([PricedLine(1.0, -1)])
        assert "quantity" in exc.value.messages


class TestConcreteScenarios:
    def test_two_units_at_twenty_without_coupon(self):
        totals = calculate_totals([PricedLine(20.0, 2)]).rounded()
        assert totals == CartTotals(subtotal=40.0, discount=0.0, shipping=9.99, tax=3.2, total=53.19)

    def test_two_units_at_twenty_with_ten_percent_coupon(self):
        totals = calculate_totals([PricedLine(20.0, 2)], discount_percentage=10).rounded()
        assert totals == CartTotals(subtotal=40.0, discount=4.0, shipping=9.99, tax=2.88, total=48.87)


class TestShipping:
    def test_shipping_charged_at_exact_threshold(self):
        totals = calculate_totals([PricedLine(50.0, 1)])
        assert totals.shipping == pytest.approx(9.99)

    def test_shipping_free_above_threshold(self):
        totals = calculate_totals([PricedLine(50.01, 1)])
        assert totals.shipping == 0.0

    def test_threshold_uses_pre_discount_subtotal(self):
        totals = calculate_totals([PricedLine(60.0, 1)], discount_percentage=50)
        assert totals.discount == pytest.approx(30.0)
        assert totals.shipping == 0.0

    def test_policy_is_injected(self):
        policy = PricingPolicy(free_shipping_threshold=100.0, flat_shipping_fee=5.0, tax_rate=0.2)
        totals = calculate_totals([PricedLine(60.0, 1)], policy=policy)
        assert totals.shipping == 5.0
        assert totals.tax == pytest.approx(12.0)
        assert totals.total == pytest.approx(77.0)


class TestDiscount:
    @pytest.mark.parametrize("percentage", [-1, 101])
    def test_discount_out_of_range_rejected(self, percentage):
        with pytest.raises(ValidationError):
            calculate_totals([PricedLine(10.0, 1)], discount_percentage=percentage)

    def test_tax_applies_after_discount(self):
        totals = calculate_totals([PricedLine(100.0, 1)], discount_percentage=25)
        assert totals.tax == pytest.approx(75.0 * 0.08)


class TestProperties:
    @pytest.mark.parametrize(
        "lines, discount",
        [
            ([PricedLine(1.99, 3)], None),
            ([PricedLine(20.0, 2), PricedLine(0.0, 5)], 10),
            ([PricedLine(49.99, 1), PricedLine(0.02, 1)], 99),
            ([PricedLine(1000.0, 7)], 1),
        ],
    )
    def test_total_is_sum_of_parts(self, lines, discount):
        totals = calculate_totals(lines, discount_percentage=discount)
        assert totals.total == pytest.approx(totals.subtotal - totals.discount + totals.shipping + totals.tax)
        assert 0 <= totals.discount <= totals.subtotal
        assert totals.tax >= 0

    def test_same_input_same_output(self):
        lines = [PricedLine(12.34, 3), PricedLine(0.99, 10)]
        assert calculate_totals(lines, 15) == calculate_totals(lines, 15)


class TestPricingPolicy:
    def test_defaults(self):
        policy = PricingPolicy()
        assert policy.free_shipping_threshold == 50.0
        assert policy.flat_shipping_fee == 9.99
        assert policy.tax_rate == 0.08

    def test_from_env(self):
        policy = PricingPolicy.from_env(
            {
                "COMMERCE_FREE_SHIPPING_THRESHOLD": "75",
                "COMMERCE_FLAT_SHIPPING_FEE": "4.5",
                "COMMERCE_TAX_RATE": "0.1",
            }
        )
        assert policy == PricingPolicy(free_shipping_threshold=75.0, flat_shipping_fee=4.5, tax_rate=0.1)

    def test_from_env_falls_back_to_defaults(self):
        assert PricingPolicy.from_env({}) == PricingPolicy()

    @pytest.mark.parametrize(
        "overrides",
        [{"free_shipping_threshold": -1}, {"flat_shipping_fee": -0.01}, {"tax_rate": 1.0}, {"tax_rate": -0.1}],
    )
    def test_invalid_policy_rejected(self, overrides):
        with pytest.raises(ValidationError):
            PricingPolicy(**overrides)
