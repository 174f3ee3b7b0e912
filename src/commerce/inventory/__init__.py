"""Inventory ledger factory.

Provides get_inventory_ledger() / set_inventory_ledger() to swap implementations:
- MemoryInventoryLedger for development and testing
- SqlInventoryLedger when COMMERCE_LEDGER_DATABASE_URI is configured
"""

from sqlalchemy import create_engine

from commerce.config import ledger_database_uri
from commerce.inventory.memory_adapter import MemoryInventoryLedger
from commerce.inventory.port import InventoryLedger, StockLevel
from commerce.inventory.sql_adapter import SqlInventoryLedger

_current_ledger: InventoryLedger | None = None


def get_inventory_ledger() -> InventoryLedger:
    """Return the current inventory ledger, building it from configuration on first use."""
    global _current_ledger
    if _current_ledger is None:
        uri = ledger_database_uri()
        _current_ledger = SqlInventoryLedger(create_engine(uri)) if uri else MemoryInventoryLedger()
    return _current_ledger


def set_inventory_ledger(ledger: InventoryLedger) -> None:
    """Override the active inventory ledger (useful for tests)."""
    global _current_ledger
    _current_ledger = ledger


def reset_inventory_ledger() -> None:
    """Reset to the configured default ledger."""
    global _current_ledger
    _current_ledger = None


__all__ = [
    "InventoryLedger",
    "MemoryInventoryLedger",
    "SqlInventoryLedger",
    "StockLevel",
    "get_inventory_ledger",
    "reset_inventory_ledger",
    "set_inventory_ledger",
]
