"""Data access layer: generic repository, entity repositories, DAO factory."""

from gatestore.dao.factory import DAOFactory
from gatestore.dao.faker import Faker
from gatestore.dao.plugins import NULL_ID, PluginHooks
from gatestore.dao.repository import (
    EntityHooks,
    IdentityHooks,
    Record,
    Repository,
    SchemaHooks,
    check_unique_fields,
)

__all__ = [
    "DAOFactory",
    "EntityHooks",
    "Faker",
    "IdentityHooks",
    "NULL_ID",
    "PluginHooks",
    "Record",
    "Repository",
    "SchemaHooks",
    "check_unique_fields",
]
