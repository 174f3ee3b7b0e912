"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, String

from commerce.domain import commerce


@commerce.event(part_of="Product")
class ProductRegistered:
    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)


@commerce.event(part_of="Product")
class ProductPriceChanged:
    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@commerce.event(part_of="Product")
class ProductDiscontinued:
    product_id = Identifier(required=True)
