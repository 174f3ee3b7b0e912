"""Product aggregate — the catalogue's view of a sellable item.

The catalogue owns names and prices. Stock on hand and units sold are owned
by the inventory ledger; ``ProductSnapshot`` joins the two for readers.
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, String

from commerce.catalogue.events import ProductDiscontinued, ProductPriceChanged, ProductRegistered
from commerce.domain import commerce
from commerce.utils.clock import utcnow


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@commerce.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, price, product_id=None):
        now = utcnow()
        values = {
            "name": name,
            "price": price,
            "status": ProductStatus.ACTIVE.value,
            "created_at": now,
            "updated_at": now,
        }
        if product_id:
            values["id"] = product_id
        product = cls(**values)
        product.raise_(ProductRegistered(product_id=str(product.id), name=product.name, price=product.price))
        return product

    @property
    def is_active(self):
        return ProductStatus(self.status) == ProductStatus.ACTIVE

    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous_price = self.price
        self.price = new_price
        self.updated_at = utcnow()
        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    def discontinue(self):
        if not self.is_active:
            raise ValidationError({"status": ["Product is already inactive"]})

        self.status = ProductStatus.INACTIVE.value
        self.updated_at = utcnow()
        self.raise_(ProductDiscontinued(product_id=str(self.id)))
