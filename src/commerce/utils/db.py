from protean.domain import Domain
from sqlalchemy import create_engine

from commerce.coupon.redemption.sql_adapter import metadata as redemption_metadata
from commerce.inventory.sql_adapter import metadata as inventory_metadata

LEDGER_METADATA = (inventory_metadata, redemption_metadata)


def setup_db(domain: Domain):
    """Create tables for every aggregate and entity held in a SQL provider."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] not in ("sqlite", "postgresql"):
                continue

            engine = create_engine(provider.conn_info["database_uri"])
            for registry in (domain.registry.aggregates, domain.registry.entities):
                for _, record in registry.items():
                    if record.cls.meta_.provider == provider.name:
                        domain.repository_for(record.cls)._dao  # noqa: B018
            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)


def setup_ledgers(database_uri: str):
    """Create the stock and coupon-usage ledger tables."""
    engine = create_engine(database_uri)
    try:
        for metadata in LEDGER_METADATA:
            metadata.create_all(engine)
    finally:
        engine.dispose()


def drop_ledgers(database_uri: str):
    engine = create_engine(database_uri)
    try:
        for metadata in LEDGER_METADATA:
            metadata.drop_all(engine)
    finally:
        engine.dispose()
