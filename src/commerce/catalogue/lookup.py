"""Read access to products for the cart and checkout."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.catalogue.product import Product
from commerce.inventory import get_inventory_ledger


@dataclass(frozen=True)
class ProductSnapshot:
    """A product's price and stock as of one read."""

    id: str
    name: str
    price: float
    stock: int
    total_sales: int
    is_active: bool


def load_product(product_id, require_active=True):
    """Read a product with its current stock level.

    Unknown products, and inactive ones when ``require_active`` is set, raise
    ``ObjectNotFoundError``.
    """
    try:
        product = current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"product_id": [f"No product found with id of {product_id}"]}) from None

    if require_active and not product.is_active:
        raise ObjectNotFoundError({"product_id": [f"Product {product_id} is not available"]})

    level = get_inventory_ledger().level(str(product.id))
    return ProductSnapshot(
        id=str(product.id),
        name=product.name,
        price=product.price,
        stock=level.stock,
        total_sales=level.total_sales,
        is_active=product.is_active,
    )


def find_product(product_id):
    """Like ``load_product`` but returns ``None`` for missing or inactive products."""
    try:
        return load_product(product_id)
    except ObjectNotFoundError:
        return None
