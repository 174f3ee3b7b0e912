"""Tests for the in-memory coupon redemption ledger."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from commerce.coupon.redemption import MemoryRedemptionLedger
from commerce.exceptions import UsageLimitReachedError
from protean.exceptions import ValidationError


@pytest.fixture()
def ledger():
    return MemoryRedemptionLedger()


def test_unused_coupon_has_zero_count(ledger):
    assert ledger.usage_count("coupon-1") == 0


def test_claim_counts_usage(ledger):
    assert ledger.claim("coupon-1", 2, "order-1") == 1
    assert ledger.claim("coupon-1", 2, "order-2") == 2
    assert ledger.usage_count("coupon-1") == 2


def test_claim_beyond_limit_rejected(ledger):
    ledger.claim("coupon-1", 1, "order-1")
    with pytest.raises(UsageLimitReachedError) as exc:
        ledger.claim("coupon-1", 1, "order-2")
    assert exc.value.usage_limit == 1
    assert ledger.usage_count("coupon-1") == 1


def test_unlimited_coupon(ledger):
    for n in range(25):
        ledger.claim("coupon-unlimited", None, f"order-{n}")
    assert ledger.usage_count("coupon-unlimited") == 25


def test_same_order_cannot_claim_twice(ledger):
    ledger.claim("coupon-1", None, "order-1")
    with pytest.raises(ValidationError):
        ledger.claim("coupon-1", None, "order-1")


def test_revoke_undoes_one_claim(ledger):
    ledger.claim("coupon-1", 1, "order-1")
    assert ledger.revoke("coupon-1", "order-1") is True
    assert ledger.usage_count("coupon-1") == 0
    assert ledger.revoke("coupon-1", "order-1") is False


def test_single_use_coupon_race(ledger):
    def attempt(n):
        try:
            ledger.claim("coupon-single-use", 1, f"order-{n}")
            return True
        except UsageLimitReachedError:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(30)))

    assert results.count(True) == 1
    assert ledger.usage_count("coupon-single-use") == 1
