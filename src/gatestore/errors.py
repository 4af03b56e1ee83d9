"""Gatestore exception hierarchy.

All Gatestore-specific exceptions inherit from GatestoreError and carry an
ErrorKind tag so callers can branch on the kind without isinstance chains.
"""

from __future__ import annotations

import enum
from typing import Mapping, Sequence


class ErrorKind(str, enum.Enum):
    """Closed set of error kinds shared by every component."""

    SCHEMA = "schema"
    UNIQUE = "unique"
    FOREIGN = "foreign"
    STORAGE = "storage"
    MIGRATION = "migration"


class GatestoreError(Exception):
    """Base exception for all Gatestore errors."""

    kind: ErrorKind


class SchemaError(GatestoreError):
    """Raised when a record does not satisfy its schema.

    ``errors`` maps each offending field to a message. Every problem found is
    reported, not only the first one.
    """

    kind = ErrorKind.SCHEMA

    def __init__(self, errors: Mapping[str, str] | str) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, str] = {}
            message = errors
        else:
            self.errors = dict(errors)
            message = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(message)


class UniqueConstraintError(GatestoreError):
    """Raised when a write would duplicate a record that must be unique."""

    kind = ErrorKind.UNIQUE

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ForeignKeyError(GatestoreError):
    """Raised when a foreign field references a record that does not exist."""

    kind = ErrorKind.FOREIGN

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} {value} does not exist")


class StorageError(GatestoreError):
    """Raised when the backing store fails (network, driver, missing table)."""

    kind = ErrorKind.STORAGE


class MigrationError(GatestoreError):
    """Raised when the migration engine cannot complete a step.

    ``migration`` names the failing migration (if any), ``applied`` lists the
    migrations that did complete before the failure.
    """

    kind = ErrorKind.MIGRATION

    def __init__(
        self,
        message: str,
        migration: str | None = None,
        applied: Sequence[str] = (),
    ) -> None:
        self.migration = migration
        self.applied = tuple(applied)
        super().__init__(message)


class ConfigurationError(GatestoreError):
    """Raised when the configuration file cannot be loaded or is invalid."""

    kind = ErrorKind.SCHEMA
