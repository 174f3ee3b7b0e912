"""SQLAlchemy-backed coupon redemption ledger.

The claim is a single conditional UPDATE:

    UPDATE coupon_usage SET usage_count = usage_count + 1
     WHERE coupon_id = :coupon_id AND usage_count < :limit

A zero row count means the limit was reached first by another order.
"""

from protean.exceptions import ValidationError
from sqlalchemy import Column, Integer, MetaData, String, Table, delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from commerce.coupon.redemption.port import RedemptionLedger
from commerce.exceptions import UsageLimitReachedError

metadata = MetaData()

coupon_usage = Table(
    "coupon_usage",
    metadata,
    Column("coupon_id", String(255), primary_key=True),
    Column("usage_count", Integer, nullable=False, default=0),
)

coupon_redemptions = Table(
    "coupon_redemptions",
    metadata,
    Column("coupon_id", String(255), primary_key=True),
    Column("reference", String(255), primary_key=True),
)


class SqlRedemptionLedger(RedemptionLedger):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        metadata.create_all(engine)

    def _ensure_counter(self, coupon_id) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(coupon_usage).values(coupon_id=coupon_id, usage_count=0))
        except IntegrityError:
            pass  # Counter row already exists

    def usage_count(self, coupon_id):
        with self._engine.connect() as conn:
            count = conn.execute(
                select(coupon_usage.c.usage_count).where(coupon_usage.c.coupon_id == str(coupon_id))
            ).scalar()
        return count or 0

    def claim(self, coupon_id, usage_limit, reference):
        coupon_id = str(coupon_id)
        self._ensure_counter(coupon_id)

        criteria = [coupon_usage.c.coupon_id == coupon_id]
        if usage_limit is not None:
            criteria.append(coupon_usage.c.usage_count < usage_limit)

        with self._engine.begin() as conn:
            result = conn.execute(
                update(coupon_usage).where(*criteria).values(usage_count=coupon_usage.c.usage_count + 1)
            )
            if result.rowcount == 0:
                raise UsageLimitReachedError(coupon_id, usage_limit)

            try:
                conn.execute(insert(coupon_redemptions).values(coupon_id=coupon_id, reference=str(reference)))
            except IntegrityError:
                raise ValidationError({"reference": [f"Coupon {coupon_id} already redeemed for {reference}"]}) from None
            return conn.execute(
                select(coupon_usage.c.usage_count).where(coupon_usage.c.coupon_id == coupon_id)
            ).scalar()

    def revoke(self, coupon_id, reference):
        coupon_id = str(coupon_id)
        with self._engine.begin() as conn:
            removed = conn.execute(
                delete(coupon_redemptions).where(
                    coupon_redemptions.c.coupon_id == coupon_id,
                    coupon_redemptions.c.reference == str(reference),
                )
            )
            if removed.rowcount == 0:
                return False

            conn.execute(
                update(coupon_usage)
                .where(coupon_usage.c.coupon_id == coupon_id, coupon_usage.c.usage_count > 0)
                .values(usage_count=coupon_usage.c.usage_count - 1)
            )
            return True
