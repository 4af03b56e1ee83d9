"""Gatestore: schema-validated data access and versioned migrations.

Validates every write against a declarative field schema, enforces the
integrity rules the backing store cannot (foreign keys, uniqueness), and
applies ordered, reversible schema migrations.
"""

from gatestore._version import __version__

# Errors
from gatestore.errors import (
    ConfigurationError,
    ErrorKind,
    ForeignKeyError,
    GatestoreError,
    MigrationError,
    SchemaError,
    StorageError,
    UniqueConstraintError,
)

# Schemas and validation
from gatestore.schema import Field, FieldType, Schema, SchemaRegistry, ValidationResult, validate

# Storage
from gatestore.storage import Statement, StatementSet, Store, create_store_engine

# Data access
from gatestore.dao import DAOFactory, EntityHooks, IdentityHooks, Repository, SchemaHooks

# Migrations
from gatestore.migrations import Migration, Migrations

# Configuration
from gatestore.config import Configuration, load_configuration, load_configuration_and_dao

__all__ = [
    "__version__",
    "ConfigurationError",
    "Configuration",
    "DAOFactory",
    "EntityHooks",
    "ErrorKind",
    "Field",
    "FieldType",
    "ForeignKeyError",
    "GatestoreError",
    "IdentityHooks",
    "Migration",
    "MigrationError",
    "Migrations",
    "Repository",
    "Schema",
    "SchemaError",
    "SchemaHooks",
    "SchemaRegistry",
    "Statement",
    "StatementSet",
    "StorageError",
    "Store",
    "UniqueConstraintError",
    "ValidationResult",
    "create_store_engine",
    "load_configuration",
    "load_configuration_and_dao",
    "validate",
]
