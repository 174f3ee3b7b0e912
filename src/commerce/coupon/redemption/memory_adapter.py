"""Process-local coupon redemption ledger for development and testing."""

import threading

from protean.exceptions import ValidationError

from commerce.coupon.redemption.port import RedemptionLedger
from commerce.exceptions import UsageLimitReachedError


class MemoryRedemptionLedger(RedemptionLedger):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._claims: set[tuple[str, str]] = set()

    def usage_count(self, coupon_id):
        with self._lock:
            return self._counts.get(str(coupon_id), 0)

    def claim(self, coupon_id, usage_limit, reference):
        key = (str(coupon_id), str(reference))
        with self._lock:
            if key in self._claims:
                raise ValidationError({"reference": [f"Coupon {coupon_id} already redeemed for {reference}"]})

            count = self._counts.get(key[0], 0)
            if usage_limit is not None and count >= usage_limit:
                raise UsageLimitReachedError(coupon_id, usage_limit)

            self._counts[key[0]] = count + 1
            self._claims.add(key)
            return count + 1

    def revoke(self, coupon_id, reference):
        key = (str(coupon_id), str(reference))
        with self._lock:
            if key not in self._claims:
                return False
            self._claims.discard(key)
            self._counts[key[0]] = max(0, self._counts.get(key[0], 0) - 1)
            return True
