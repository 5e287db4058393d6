from protean.domain import Domain
from sqlalchemy import create_engine


def _register_tables(domain: Domain, provider) -> None:
    # Accessing ``_dao`` forces the SQLAlchemy model for each element to be
    # built and registered on the provider's metadata.
    for _, aggregate_record in domain.registry.aggregates.items():
        if aggregate_record.cls.meta_.provider == provider.name:
            domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

    for _, entity_record in domain.registry.entities.items():
        if entity_record.cls.meta_.provider == provider.name:
            domain.repository_for(entity_record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Create RDBMS tables for every relational provider of the domain."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])
                _register_tables(domain, provider)
                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop RDBMS tables created by ``setup_db``."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
