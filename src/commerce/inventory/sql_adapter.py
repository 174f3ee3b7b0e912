"""SQLAlchemy-backed inventory ledger.

Each mutation is one conditional UPDATE, so the database arbitrates between
concurrent checkouts:

    UPDATE inventory_stock_levels
       SET stock = stock - :q, total_sales = total_sales + :q
     WHERE product_id = :id AND stock >= :q

A zero row count means the reservation lost (or the product is unknown).
Releases flip the reservation's ``released`` flag with the same conditional
pattern before touching stock, so a reservation is returned at most once.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, case, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from commerce.exceptions import InsufficientStockError
from commerce.inventory.port import InventoryLedger, StockLevel

metadata = MetaData()

stock_levels = Table(
    "inventory_stock_levels",
    metadata,
    Column("product_id", String(255), primary_key=True),
    Column("stock", Integer, nullable=False),
    Column("total_sales", Integer, nullable=False, default=0),
)

stock_reservations = Table(
    "inventory_reservations",
    metadata,
    Column("product_id", String(255), primary_key=True),
    Column("reference", String(255), primary_key=True),
    Column("quantity", Integer, nullable=False),
    Column("released", Boolean, nullable=False, default=False),
)


class SqlInventoryLedger(InventoryLedger):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        metadata.create_all(engine)

    @staticmethod
    def _read(conn, product_id) -> StockLevel:
        row = conn.execute(select(stock_levels).where(stock_levels.c.product_id == str(product_id))).first()
        if row is None:
            raise ObjectNotFoundError({"product_id": [f"No stock recorded for product {product_id}"]})
        return StockLevel(product_id=row.product_id, stock=row.stock, total_sales=row.total_sales)

    def open_account(self, product_id, stock=0, total_sales=0):
        if stock < 0 or total_sales < 0:
            raise ValidationError({"stock": ["Stock and sales cannot be negative"]})

        with self._engine.begin() as conn:
            try:
                conn.execute(
                    insert(stock_levels).values(
                        product_id=str(product_id),
                        stock=stock,
                        total_sales=total_sales,
                    )
                )
            except IntegrityError:
                raise ValidationError({"product_id": [f"Stock is already tracked for product {product_id}"]}) from None
            return self._read(conn, product_id)

    def level(self, product_id):
        with self._engine.connect() as conn:
            return self._read(conn, product_id)

    def reserve(self, product_id, quantity, reference):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        with self._engine.begin() as conn:
            result = conn.execute(
                update(stock_levels)
                .where(
                    stock_levels.c.product_id == str(product_id),
                    stock_levels.c.stock >= quantity,
                )
                .values(
                    stock=stock_levels.c.stock - quantity,
                    total_sales=stock_levels.c.total_sales + quantity,
                )
            )
            if result.rowcount == 0:
                current = self._read(conn, product_id)
                raise InsufficientStockError(product_id, quantity, current.stock)

            try:
                conn.execute(
                    insert(stock_reservations).values(
                        product_id=str(product_id),
                        reference=str(reference),
                        quantity=quantity,
                        released=False,
                    )
                )
            except IntegrityError:
                # Raising out of the transaction rolls the stock update back too
                raise ValidationError({"reference": [f"Stock already reserved for {reference}"]}) from None

            return self._read(conn, product_id)

    def release(self, product_id, reference):
        reservation = (
            stock_reservations.c.product_id == str(product_id),
            stock_reservations.c.reference == str(reference),
            stock_reservations.c.released.is_(False),
        )

        with self._engine.begin() as conn:
            row = conn.execute(select(stock_reservations.c.quantity).where(*reservation)).first()
            if row is None:
                return None

            claimed = conn.execute(update(stock_reservations).where(*reservation).values(released=True))
            if claimed.rowcount == 0:
                return None

            quantity = row.quantity
            conn.execute(
                update(stock_levels)
                .where(stock_levels.c.product_id == str(product_id))
                .values(
                    stock=stock_levels.c.stock + quantity,
                    total_sales=case(
                        (stock_levels.c.total_sales >= quantity, stock_levels.c.total_sales - quantity),
                        else_=0,
                    ),
                )
            )
            return self._read(conn, product_id)

    def restock(self, product_id, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        with self._engine.begin() as conn:
            result = conn.execute(
                update(stock_levels)
                .where(stock_levels.c.product_id == str(product_id))
                .values(stock=stock_levels.c.stock + quantity)
            )
            if result.rowcount == 0:
                raise ObjectNotFoundError({"product_id": [f"No stock recorded for product {product_id}"]})
            return self._read(conn, product_id)
