"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart
from commerce.cart.management import load_or_create_cart
from commerce.catalogue.lookup import load_product
from commerce.domain import commerce


@commerce.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@commerce.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@commerce.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@commerce.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


@commerce.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_product(command.product_id)
        cart = load_or_create_cart(command.customer_id)
        cart.add_item(
            product_id=product.id,
            quantity=command.quantity,
            available_stock=product.stock,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = load_or_create_cart(command.customer_id)
        product = load_product(command.product_id)
        cart.update_item_quantity(
            product_id=product.id,
            new_quantity=command.new_quantity,
            available_stock=product.stock,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = load_or_create_cart(command.customer_id)
        cart.remove_item(product_id=command.product_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_or_create_cart(command.customer_id)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)
