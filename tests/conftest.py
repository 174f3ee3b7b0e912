import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the Protean config overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def fresh_ledgers_and_policy():
    """Give every test empty in-memory ledgers and the default pricing policy."""
    from commerce.config import PricingPolicy, reset_pricing_policy, set_pricing_policy
    from commerce.coupon.redemption import MemoryRedemptionLedger, reset_redemption_ledger, set_redemption_ledger
    from commerce.inventory import MemoryInventoryLedger, reset_inventory_ledger, set_inventory_ledger

    set_inventory_ledger(MemoryInventoryLedger())
    set_redemption_ledger(MemoryRedemptionLedger())
    set_pricing_policy(PricingPolicy())

    yield

    reset_inventory_ledger()
    reset_redemption_ledger()
    reset_pricing_policy()
