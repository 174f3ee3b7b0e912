"""Catalogue stand-in — product registration, repricing and discontinuation.

Full catalogue management lives outside this service; these commands exist so
that products, with their opening stock, can be put in front of the cart and
checkout.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from commerce.catalogue.product import Product
from commerce.domain import commerce
from commerce.inventory import get_inventory_ledger

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Product")
class RegisterProduct:
    product_id = Identifier()  # Optional: lets the catalogue keep its own ids
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    initial_stock = Integer(default=0, min_value=0)


@commerce.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    new_price = Float(required=True, min_value=0.0)


@commerce.command(part_of="Product")
class DiscontinueProduct:
    product_id = Identifier(required=True)


@commerce.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@commerce.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            price=command.price,
            product_id=command.product_id,
        )
        get_inventory_ledger().open_account(str(product.id), stock=command.initial_stock or 0)
        current_domain.repository_for(Product).add(product)
        logger.info(
            "product registered",
            product_id=str(product.id),
            price=product.price,
            initial_stock=command.initial_stock or 0,
        )
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(command.new_price)
        repo.add(product)

    @handle(DiscontinueProduct)
    def discontinue(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.discontinue()
        repo.add(product)

    @handle(RestockProduct)
    def restock(self, command):
        current_domain.repository_for(Product).get(command.product_id)
        level = get_inventory_ledger().restock(command.product_id, command.quantity)
        logger.info("product restocked", product_id=str(command.product_id), stock=level.stock)
