"""Coupon redemption ledger factory.

Provides get_redemption_ledger() / set_redemption_ledger() to swap implementations:
- MemoryRedemptionLedger for development and testing
- SqlRedemptionLedger when COMMERCE_LEDGER_DATABASE_URI is configured
"""

from sqlalchemy import create_engine

from commerce.config import ledger_database_uri
from commerce.coupon.redemption.memory_adapter import MemoryRedemptionLedger
from commerce.coupon.redemption.port import RedemptionLedger
from commerce.coupon.redemption.sql_adapter import SqlRedemptionLedger

_current_ledger: RedemptionLedger | None = None


def get_redemption_ledger() -> RedemptionLedger:
    """Return the current redemption ledger, building it from configuration on first use."""
    global _current_ledger
    if _current_ledger is None:
        uri = ledger_database_uri()
        _current_ledger = SqlRedemptionLedger(create_engine(uri)) if uri else MemoryRedemptionLedger()
    return _current_ledger


def set_redemption_ledger(ledger: RedemptionLedger) -> None:
    """Override the active redemption ledger (useful for tests)."""
    global _current_ledger
    _current_ledger = ledger


def reset_redemption_ledger() -> None:
    """Reset to the configured default ledger."""
    global _current_ledger
    _current_ledger = None


__all__ = [
    "MemoryRedemptionLedger",
    "RedemptionLedger",
    "SqlRedemptionLedger",
    "get_redemption_ledger",
    "reset_redemption_ledger",
    "set_redemption_ledger",
]
