from datetime import timedelta

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def commerce_bed():
    from commerce.domain import commerce

    bed = DomainFixture(commerce)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(commerce_bed):
    with commerce_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Catalogue and coupon factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_product():
    """Register a product with opening stock and return its id."""
    from commerce.catalogue.registration import RegisterProduct
    from protean import current_domain

    def _register(name="Widget", price=20.0, stock=10):
        return current_domain.process(
            RegisterProduct(name=name, price=price, initial_stock=stock),
            asynchronous=False,
        )

    return _register


@pytest.fixture()
def create_coupon():
    """Create a coupon valid from yesterday until next month and return its id."""
    from commerce.coupon.management import CreateCoupon
    from commerce.utils.clock import utcnow
    from protean import current_domain

    def _create(code="SAVE10", discount_percentage=10, **overrides):
        now = utcnow()
        values = {
            "code": code,
            "discount_percentage": discount_percentage,
            "start_date": now - timedelta(days=1),
            "expiry_date": now + timedelta(days=30),
        }
        values.update(overrides)
        return current_domain.process(CreateCoupon(**values), asynchronous=False)

    return _create


@pytest.fixture()
def shipping_address():
    return {
        "address": "1 Main St",
        "city": "Springfield",
        "postal_code": "12345",
        "country": "US",
    }
