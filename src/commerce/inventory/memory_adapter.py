"""Process-local inventory ledger for development and testing.

All reads and writes go through one lock, which makes every reserve/release
a single atomic step for threads sharing the ledger.
"""

import threading

from protean.exceptions import ObjectNotFoundError, ValidationError

from commerce.exceptions import InsufficientStockError
from commerce.inventory.port import InventoryLedger, StockLevel


class MemoryInventoryLedger(InventoryLedger):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._levels: dict[str, StockLevel] = {}
        self._reservations: dict[tuple[str, str], int] = {}

    def _get(self, product_id) -> StockLevel:
        try:
            return self._levels[str(product_id)]
        except KeyError:
            raise ObjectNotFoundError({"product_id": [f"No stock recorded for product {product_id}"]}) from None

    def open_account(self, product_id, stock=0, total_sales=0):
        if stock < 0 or total_sales < 0:
            raise ValidationError({"stock": ["Stock and sales cannot be negative"]})

        with self._lock:
            if str(product_id) in self._levels:
                raise ValidationError({"product_id": [f"Stock is already tracked for product {product_id}"]})
            level = StockLevel(product_id=str(product_id), stock=stock, total_sales=total_sales)
            self._levels[str(product_id)] = level
            return level

    def level(self, product_id):
        with self._lock:
            return self._get(product_id)

    def reserve(self, product_id, quantity, reference):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        key = (str(product_id), str(reference))
        with self._lock:
            current = self._get(product_id)
            if key in self._reservations:
                raise ValidationError({"reference": [f"Stock already reserved for {reference}"]})
            if current.stock < quantity:
                raise InsufficientStockError(product_id, quantity, current.stock)

            updated = StockLevel(
                product_id=current.product_id,
                stock=current.stock - quantity,
                total_sales=current.total_sales + quantity,
            )
            self._levels[current.product_id] = updated
            self._reservations[key] = quantity
            return updated

    def release(self, product_id, reference):
        key = (str(product_id), str(reference))
        with self._lock:
            quantity = self._reservations.pop(key, None)
            if quantity is None:
                return None

            current = self._get(product_id)
            updated = StockLevel(
                product_id=current.product_id,
                stock=current.stock + quantity,
                total_sales=max(0, current.total_sales - quantity),
            )
            self._levels[current.product_id] = updated
            return updated

    def restock(self, product_id, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        with self._lock:
            current = self._get(product_id)
            updated = StockLevel(
                product_id=current.product_id,
                stock=current.stock + quantity,
                total_sales=current.total_sales,
            )
            self._levels[current.product_id] = updated
            return updated
