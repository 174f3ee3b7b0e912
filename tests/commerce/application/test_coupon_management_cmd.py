from datetime import timedelta

import pytest
from commerce.coupon.coupon import Coupon
from commerce.coupon.lookup import coupon_details, find_coupon_by_code, list_coupons
from commerce.coupon.management import DeactivateCoupon, DeleteCoupon, UpdateCoupon
from commerce.coupon.redemption import get_redemption_ledger
from commerce.utils.clock import utcnow
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


class TestCreateCoupon:
    def test_code_is_stored_upper_case(self, create_coupon):
        coupon_id = create_coupon(code="  spring25 ", discount_percentage=25)
        coupon = current_domain.repository_for(Coupon).get(coupon_id)
        assert coupon.code == "SPRING25"
        assert coupon.is_active is True

    def test_lookup_ignores_case(self, create_coupon):
        coupon_id = create_coupon(code="SPRING25")
        assert str(find_coupon_by_code("spring25").id) == coupon_id

    def test_duplicate_code_rejected(self, create_coupon):
        create_coupon(code="SAVE10")
        with pytest.raises(ValidationError) as exc:
            create_coupon(code="save10")
        assert "code" in exc.value.messages

    @pytest.mark.parametrize("percentage", [0, 100, 150])
    def test_discount_out_of_range_rejected(self, create_coupon, percentage):
        with pytest.raises(ValidationError):
            create_coupon(code="BAD", discount_percentage=percentage)

    def test_expiry_before_start_rejected(self, create_coupon):
        now = utcnow()
        with pytest.raises(ValidationError) as exc:
            create_coupon(code="BACKWARDS", start_date=now, expiry_date=now - timedelta(days=1))
        assert "expiry_date" in exc.value.messages

    def test_details_include_live_usage(self, create_coupon):
        coupon_id = create_coupon(code="COUNTED", usage_limit=5)
        get_redemption_ledger().claim(coupon_id, 5, "order-1")
        details = coupon_details(current_domain.repository_for(Coupon).get(coupon_id))
        assert details["usage_count"] == 1
        assert details["usage_limit"] == 5

    def test_usage_follows_the_coupon_through_a_rename(self, create_coupon):
        coupon_id = create_coupon(code="BEFORE", usage_limit=1)
        get_redemption_ledger().claim(coupon_id, 1, "order-1")
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, code="AFTER"), asynchronous=False)

        details = coupon_details(find_coupon_by_code("AFTER"))

        assert details["usage_count"] == 1

    def test_recreated_code_starts_with_no_usage(self, create_coupon):
        old_id = create_coupon(code="REUSED", usage_limit=1)
        get_redemption_ledger().claim(old_id, 1, "order-1")
        current_domain.process(DeleteCoupon(coupon_id=old_id), asynchronous=False)

        new_id = create_coupon(code="REUSED", usage_limit=1)

        assert new_id != old_id
        assert coupon_details(find_coupon_by_code("REUSED"))["usage_count"] == 0


class TestUpdateCoupon:
    def test_unset_fields_keep_their_values(self, create_coupon):
        coupon_id = create_coupon(code="KEEP", discount_percentage=15, min_purchase=20.0)
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, description="Spring sale"), asynchronous=False)

        coupon = current_domain.repository_for(Coupon).get(coupon_id)
        assert coupon.description == "Spring sale"
        assert coupon.discount_percentage == 15
        assert coupon.min_purchase == 20.0

    def test_clear_usage_limit(self, create_coupon):
        coupon_id = create_coupon(code="LIMITED", usage_limit=3)
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, clear_usage_limit=True), asynchronous=False)
        assert current_domain.repository_for(Coupon).get(coupon_id).usage_limit is None

    def test_rename_to_taken_code_rejected(self, create_coupon):
        create_coupon(code="FIRST")
        second = create_coupon(code="SECOND")
        with pytest.raises(ValidationError):
            current_domain.process(UpdateCoupon(coupon_id=second, code="first"), asynchronous=False)

    def test_rename_to_own_code_allowed(self, create_coupon):
        coupon_id = create_coupon(code="SAME")
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, code="same"), asynchronous=False)
        assert current_domain.repository_for(Coupon).get(coupon_id).code == "SAME"

    def test_unknown_coupon(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateCoupon(coupon_id="missing", description="x"), asynchronous=False)


class TestDeactivateAndDelete:
    def test_deactivate(self, create_coupon):
        coupon_id = create_coupon(code="GONE")
        current_domain.process(DeactivateCoupon(coupon_id=coupon_id), asynchronous=False)
        assert current_domain.repository_for(Coupon).get(coupon_id).is_active is False

    def test_delete(self, create_coupon):
        coupon_id = create_coupon(code="TEMP")
        current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
        with pytest.raises(ObjectNotFoundError):
            find_coupon_by_code("TEMP")

    def test_list_is_sorted_by_code(self, create_coupon):
        create_coupon(code="ZETA")
        create_coupon(code="ALPHA")
        assert [c.code for c in list_coupons()] == ["ALPHA", "ZETA"]
