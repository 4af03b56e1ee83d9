"""Shared test fixtures for Gatestore.

Provides an in-memory SQLite store, a migrated DAO factory, and a few
ready-made entities.
"""

import pytest

from gatestore.dao.factory import DAOFactory
from gatestore.storage.engine import Store, create_store_engine


@pytest.fixture
def engine():
    """In-memory SQLite engine with no tables."""
    eng = create_store_engine(":memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> Store:
    return Store(engine)


@pytest.fixture
def dao(store: Store) -> DAOFactory:
    """DAO factory with the bundled migrations applied."""
    factory = DAOFactory(store, {"keyspace": "gatestore_tests"})
    factory.migrate()
    return factory


@pytest.fixture
def api(dao: DAOFactory) -> dict:
    return dao.apis.insert(
        {"name": "mockbin", "public_dns": "mockbin.com", "target_url": "http://mockbin.com"}
    )


@pytest.fixture
def account(dao: DAOFactory) -> dict:
    return dao.accounts.insert({"provider_id": "provider_001"})


@pytest.fixture
def application(dao: DAOFactory, account: dict) -> dict:
    return dao.applications.insert(
        {"account_id": account["id"], "public_key": "apikey123", "secret_key": "secret"}
    )


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def query_plugin_value(name: str = "authentication", **overrides) -> dict:
    """A valid configuration for the authentication plugin (query mode)."""
    value = {
        "authentication_type": "query",
        "authentication_key_names": ["apikey"],
        "hide_credentials": False,
    }
    value.update(overrides)
    return value
