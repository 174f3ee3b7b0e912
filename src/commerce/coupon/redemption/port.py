"""Coupon redemption ledger port (abstract interface).

Owns each coupon's usage count, keyed by coupon id so that renaming a coupon
keeps its count and a new coupon reusing an old code starts from zero.
``claim`` is an atomic "increment only if below the limit", so a single-use
coupon can back exactly one order no matter how many checkouts race for it.
Every claim is recorded under a reference (the order id) so that a failed
checkout can revoke exactly its own claim.
"""

from abc import ABC, abstractmethod


class RedemptionLedger(ABC):
    """Abstract coupon redemption ledger interface."""

    @abstractmethod
    def usage_count(self, coupon_id: str) -> int:
        """Number of orders the coupon has been redeemed on (0 if never)."""
        ...

    @abstractmethod
    def claim(self, coupon_id: str, usage_limit: int | None, reference: str) -> int:
        """Count one more use of the coupon and return the new usage count.

        Raises ``UsageLimitReachedError`` without changing anything when the
        count has already reached ``usage_limit``. ``None`` means unlimited.
        """
        ...

    @abstractmethod
    def revoke(self, coupon_id: str, reference: str) -> bool:
        """Undo the claim recorded under ``reference``. Returns False if there was none."""
        ...
