"""Inventory ledger port (abstract interface).

The ledger is the only writer of a product's ``stock`` and ``total_sales``.
Every mutation is a single conditional read-modify-write per product, so two
checkouts racing for the last unit cannot both win:

- ``reserve`` takes units only if enough are on hand, and records the
  reservation under a reference (the order id)
- ``release`` gives back exactly what a reference reserved, at most once

Adapters:
- MemoryInventoryLedger: process-local, lock-guarded (dev/test)
- SqlInventoryLedger: conditional UPDATE statements through SQLAlchemy
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StockLevel:
    """Stock on hand and units sold for one product."""

    product_id: str
    stock: int
    total_sales: int = 0


class InventoryLedger(ABC):
    """Abstract inventory ledger interface."""

    @abstractmethod
    def open_account(self, product_id: str, stock: int = 0, total_sales: int = 0) -> StockLevel:
        """Start tracking stock for a product."""
        ...

    @abstractmethod
    def level(self, product_id: str) -> StockLevel:
        """Current stock level. Raises ``ObjectNotFoundError`` for unknown products."""
        ...

    @abstractmethod
    def reserve(self, product_id: str, quantity: int, reference: str) -> StockLevel:
        """Take ``quantity`` units out of stock and count them as sold.

        Raises ``InsufficientStockError`` when fewer than ``quantity`` units
        are on hand; nothing changes in that case.
        """
        ...

    @abstractmethod
    def release(self, product_id: str, reference: str) -> StockLevel | None:
        """Return the units reserved under ``reference`` to stock.

        Returns ``None`` without changing anything when the reference holds
        no active reservation for the product (never reserved, or already
        released).
        """
        ...

    @abstractmethod
    def restock(self, product_id: str, quantity: int) -> StockLevel:
        """Add received units to stock."""
        ...
