"""Tunable business constants and infrastructure settings.

Values are read from the environment once, when the active settings are first
requested, and can be swapped wholesale with ``set_pricing_policy()`` (useful
for tests):

- ``COMMERCE_FREE_SHIPPING_THRESHOLD``: subtotal above which shipping is free
- ``COMMERCE_FLAT_SHIPPING_FEE``: shipping charged at or below the threshold
- ``COMMERCE_TAX_RATE``: flat tax rate applied to the discounted subtotal
- ``COMMERCE_LEDGER_DATABASE_URI``: SQLAlchemy URI for the stock and coupon
  ledgers; in-memory ledgers are used when unset
"""

import os
from dataclasses import dataclass

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class PricingPolicy:
    """Shipping and tax rules applied by the pricing calculator."""

    free_shipping_threshold: float = 50.0
    flat_shipping_fee: float = 9.99
    tax_rate: float = 0.08

    def __post_init__(self):
        errors = {}
        if self.free_shipping_threshold < 0:
            errors["free_shipping_threshold"] = ["Threshold cannot be negative"]
        if self.flat_shipping_fee < 0:
            errors["flat_shipping_fee"] = ["Shipping fee cannot be negative"]
        if not 0 <= self.tax_rate < 1:
            errors["tax_rate"] = ["Tax rate must be between 0 and 1"]
        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_env(cls, environ=None) -> "PricingPolicy":
        environ = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            free_shipping_threshold=float(
                environ.get("COMMERCE_FREE_SHIPPING_THRESHOLD", defaults.free_shipping_threshold)
            ),
            flat_shipping_fee=float(environ.get("COMMERCE_FLAT_SHIPPING_FEE", defaults.flat_shipping_fee)),
            tax_rate=float(environ.get("COMMERCE_TAX_RATE", defaults.tax_rate)),
        )


_current_policy: PricingPolicy | None = None


def get_pricing_policy() -> PricingPolicy:
    """Return the active pricing policy, loading it from the environment on first use."""
    global _current_policy
    if _current_policy is None:
        _current_policy = PricingPolicy.from_env()
    return _current_policy


def set_pricing_policy(policy: PricingPolicy) -> None:
    """Override the active pricing policy."""
    global _current_policy
    _current_policy = policy


def reset_pricing_policy() -> None:
    """Forget the active policy so the next read goes back to the environment."""
    global _current_policy
    _current_policy = None


def ledger_database_uri() -> str | None:
    return os.environ.get("COMMERCE_LEDGER_DATABASE_URI") or None
