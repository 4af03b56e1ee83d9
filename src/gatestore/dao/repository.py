"""Generic repository for single-entity CRUD.

A Repository is parameterized by a schema and a fixed StatementSet. What
differs between entities (extra integrity checks, how a record maps onto a
storage row) is supplied by an EntityHooks object rather than a subclass.

Integrity checks run as separate round-trips before the write. There is no
atomicity across check-then-write: a concurrent writer can slip in between.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Mapping, Protocol

from gatestore.dao.codec import decode_row, encode_row
from gatestore.errors import ForeignKeyError, SchemaError, UniqueConstraintError
from gatestore.schema.validator import validate

if TYPE_CHECKING:
    from gatestore.schema.fields import Schema
    from gatestore.storage.engine import Store
    from gatestore.storage.statements import StatementSet

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class EntityHooks(Protocol):
    """Extension points a Repository calls into."""

    def check(self, repository: Repository, record: Record, existing: Record | None) -> None:
        """Entity-specific checks before a write. Raise to abort the write.

        ``existing`` is the stored record on update, None on insert.
        """
        ...

    def marshall(self, record: Mapping[str, Any]) -> Record:
        """Convert an in-memory record (or partial criteria) to a storage row."""
        ...

    def unmarshall(self, row: Mapping[str, Any]) -> Record:
        """Convert a storage row to an in-memory record."""
        ...


class IdentityHooks:
    """No checks; records are stored exactly as given."""

    def check(self, repository: Repository, record: Record, existing: Record | None) -> None:
        return None

    def marshall(self, record: Mapping[str, Any]) -> Record:
        return dict(record)

    def unmarshall(self, row: Mapping[str, Any]) -> Record:
        return dict(row)


class SchemaHooks:
    """Schema-driven (de)serialization plus single-field uniqueness.

    Every field flagged ``unique`` needs a ``unique_<field>`` custom check in
    the entity's StatementSet.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def check(self, repository: Repository, record: Record, existing: Record | None) -> None:
        check_unique_fields(repository, record, existing)

    def marshall(self, record: Mapping[str, Any]) -> Record:
        return encode_row(record, self.schema)

    def unmarshall(self, row: Mapping[str, Any]) -> Record:
        return decode_row(row, self.schema)


def check_unique_fields(repository: Repository, record: Record, existing: Record | None) -> None:
    """Raise UniqueConstraintError if another record holds a unique field's value."""
    schema = repository.schema
    key = record.get(schema.primary_key)
    for name in schema.names_where(lambda f: f.unique):
        value = record.get(name)
        if value is None:
            continue
        if existing is not None and existing.get(name) == value:
            continue
        if repository.exists_matching(f"unique_{name}", {name: value}, excluding_id=key):
            raise UniqueConstraintError(
                f"{name} already exists with value '{value}'", field=name
            )


class Repository:
    """CRUD engine for one entity."""

    def __init__(
        self,
        store: Store,
        name: str,
        schema: Schema,
        statements: StatementSet,
        hooks: EntityHooks | None = None,
    ) -> None:
        if schema.primary_key is None:
            raise ValueError(f"Schema for '{name}' has no primary key")
        missing = [
            f for f in schema.names_where(lambda f: f.foreign)
            if f not in statements.foreign
        ]
        if missing:
            raise ValueError(f"No foreign check statement for {missing} in '{name}'")
        self.store = store
        self.name = name
        self.schema = schema
        self.statements = statements
        self.hooks: EntityHooks = hooks if hooks is not None else IdentityHooks()

    @property
    def primary_key(self) -> str:
        return self.schema.primary_key  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: Mapping[str, Any]) -> Record:
        """Validate, check, and store a new record. Returns the stored record.

        A primary key is generated when the caller does not supply one.

        Raises:
            SchemaError: the record does not satisfy the schema.
            ForeignKeyError: a foreign field references a missing record.
            UniqueConstraintError: raised by the entity hooks.
            StorageError: the store failed.
        """
        record = dict(record)
        if record.get(self.primary_key) is None:
            record[self.primary_key] = str(uuid.uuid4())

        ok, errors = validate(record, self.schema)
        if not ok:
            raise SchemaError(errors)

        self.hooks.check(self, record, None)
        self._check_foreign(record)

        row = self.hooks.marshall(record)
        self.store.execute_write(self.statements.insert, row)
        logger.debug("Inserted %s %s", self.name, record[self.primary_key])
        return self.hooks.unmarshall(row)

    def update(self, record: Mapping[str, Any]) -> Record | None:
        """Apply a partial update to the record identified by its primary key.

        Fields absent from ``record`` keep their stored value. Returns the
        full updated record, or None if no record has that key.
        """
        patch = dict(record)
        key = patch.get(self.primary_key)
        if key is None:
            raise SchemaError({self.primary_key: f"{self.primary_key} is required"})

        ok, errors = validate(patch, self.schema, partial=True)
        if not ok:
            raise SchemaError(errors)

        existing = self.select_one(key)
        if existing is None:
            return None

        merged = {**existing, **patch}
        self.hooks.check(self, merged, existing)
        self._check_foreign(merged)

        row = self.hooks.marshall(merged)
        self.store.execute_write(self.statements.update, row)
        logger.debug("Updated %s %s", self.name, key)
        return self.hooks.unmarshall(row)

    def delete(self, key: str) -> bool:
        """Delete by primary key. Returns False if nothing was deleted."""
        count = self.store.execute_write(self.statements.delete, {self.primary_key: key})
        logger.debug("Deleted %s %s (%d rows)", self.name, key, count)
        return count > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def select_one(self, key: str) -> Record | None:
        rows = self.store.execute(self.statements.select_one, {self.primary_key: key})
        if not rows:
            return None
        return self.hooks.unmarshall(rows[0])

    def select(self, filter: Mapping[str, Any] | None = None, *, limit: int | None = None) -> list[Record]:
        """Select records matching every key/value of filter.

        Only queryable fields may appear in filter.
        """
        criteria = dict(filter or {})
        errors = {
            k: f"{k} is not queryable"
            for k in criteria
            if k not in self.schema or not self.schema[k].queryable
        }
        if errors:
            raise SchemaError(errors)

        statement = self.statements.select.filtered(criteria, limit=limit)
        rows = self.store.execute(statement, self.hooks.marshall(criteria))
        return [self.hooks.unmarshall(r) for r in rows]

    def exists_matching(
        self,
        check: str,
        criteria: Mapping[str, Any],
        excluding_id: str | None = None,
    ) -> bool:
        """Whether the named custom check finds a record other than excluding_id.

        The check statement must select the primary key column.
        """
        try:
            statement = self.statements.custom_checks[check]
        except KeyError:
            raise ValueError(f"'{self.name}' declares no custom check '{check}'") from None
        rows = self.store.execute(statement, self.hooks.marshall(criteria))
        return any(r.get(self.primary_key) != excluding_id for r in rows)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_foreign(self, record: Mapping[str, Any]) -> None:
        for name in self.schema.names_where(lambda f: f.foreign):
            value = record.get(name)
            if value is None:
                continue
            rows = self.store.execute(self.statements.foreign[name], {name: value})
            if not rows:
                logger.debug("Foreign check failed: %s.%s=%s", self.name, name, value)
                raise ForeignKeyError(name, value)
