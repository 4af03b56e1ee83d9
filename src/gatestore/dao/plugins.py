"""Plugin configurations.

A plugin row binds a named plugin to an API and, optionally, to a single
application. Its ``value`` is a structured blob whose shape depends on the
plugin name and is checked against the schema registered for that name.

The storage key cannot hold a NULL application_id, so an absent one is
written as NULL_ID. The sentinel exists only in storage rows: records handed
to or returned from the repository never contain it.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Mapping

from gatestore.dao.entities import utcnow
from gatestore.dao.repository import Record, Repository, SchemaHooks
from gatestore.errors import SchemaError, UniqueConstraintError
from gatestore.schema.fields import Field, FieldType, Schema
from gatestore.schema.validator import validate
from gatestore.storage.statements import Statement, StatementSet

if TYPE_CHECKING:
    from gatestore.schema.registry import SchemaRegistry
    from gatestore.storage.engine import Store

logger = logging.getLogger(__name__)

NULL_ID = "00000000-0000-0000-0000-000000000000"

UNIQUE_FIELDS = ("api_id", "application_id", "name")

PLUGIN_SCHEMA = Schema(
    {
        "id": Field(type=FieldType.ID),
        "api_id": Field(type=FieldType.ID, required=True, foreign=True, references="apis", queryable=True),
        "application_id": Field(type=FieldType.ID, foreign=True, references="applications", queryable=True),
        "name": Field(required=True, queryable=True, immutable=True),
        "value": Field(type=FieldType.TABLE, required=True),
        "enabled": Field(type=FieldType.BOOLEAN, default=True),
        "created_at": Field(type=FieldType.TIMESTAMP, default=utcnow),
    },
    primary_key="id",
)

PLUGIN_STATEMENTS = StatementSet(
    insert=Statement(
        "INSERT INTO plugins(id, api_id, application_id, name, value, enabled, created_at) "
        "VALUES(:id, :api_id, :application_id, :name, :value, :enabled, :created_at);",
        ("id", "api_id", "application_id", "name", "value", "enabled", "created_at"),
    ),
    update=Statement(
        "UPDATE plugins SET api_id = :api_id, application_id = :application_id, value = :value, "
        "enabled = :enabled, created_at = :created_at WHERE id = :id AND name = :name;",
        ("api_id", "application_id", "value", "enabled", "created_at", "id", "name"),
    ),
    select=Statement("SELECT * FROM plugins"),
    select_one=Statement("SELECT * FROM plugins WHERE id = :id;", ("id",)),
    delete=Statement("DELETE FROM plugins WHERE id = :id;", ("id",)),
    custom_checks={
        "unique": Statement(
            "SELECT id FROM plugins WHERE api_id = :api_id "
            "AND application_id = :application_id AND name = :name;",
            UNIQUE_FIELDS,
        ),
    },
    foreign={
        "api_id": Statement("SELECT id FROM apis WHERE id = :api_id;", ("api_id",)),
        "application_id": Statement(
            "SELECT id FROM applications WHERE id = :application_id;", ("application_id",)
        ),
    },
)


class PluginHooks:
    """Sub-schema validation, composite uniqueness, and the NULL_ID boundary."""

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry
        self._codec = SchemaHooks(PLUGIN_SCHEMA)

    def check(self, repository: Repository, record: Record, existing: Record | None) -> None:
        self._check_value_schema(record, existing)
        self._check_unicity(repository, record, existing)

    def marshall(self, record: Mapping[str, Any]) -> Record:
        row = self._codec.marshall(record)
        if row.get("application_id") is None:
            row["application_id"] = NULL_ID
        return row

    def unmarshall(self, row: Mapping[str, Any]) -> Record:
        record = self._codec.unmarshall(row)
        if record.get("application_id") == NULL_ID:
            del record["application_id"]
        return record

    def _check_value_schema(self, record: Record, existing: Record | None) -> None:
        name = record["name"]
        plugin_schema = self.registry.lookup(name)
        if plugin_schema is None:
            raise SchemaError({"name": f'Plugin "{name}" not found'})

        # Defaults get materialized into the value; never into the caller's copy.
        value = copy.deepcopy(record["value"])
        record["value"] = value
        if not isinstance(value, dict):
            raise SchemaError({"value": "value is not a table"})

        ok, errors = validate(value, plugin_schema)
        errors = {f"value.{k}": v for k, v in errors.items()}
        if existing is not None:
            previous = existing.get("value") or {}
            for field_name in plugin_schema.names_where(lambda f: f.immutable):
                if field_name in previous and value.get(field_name) != previous[field_name]:
                    errors[f"value.{field_name}"] = f"{field_name} cannot be updated"
        if errors:
            raise SchemaError(errors)

    def _check_unicity(self, repository: Repository, record: Record, existing: Record | None) -> None:
        if existing is not None and all(existing.get(f) == record.get(f) for f in UNIQUE_FIELDS):
            return
        if repository.exists_matching("unique", record, excluding_id=record.get("id")):
            logger.debug("Duplicate plugin %s for api %s", record.get("name"), record.get("api_id"))
            raise UniqueConstraintError("Plugin already exists")


def create_plugin_repository(store: Store, registry: SchemaRegistry) -> Repository:
    return Repository(store, "plugins", PLUGIN_SCHEMA, PLUGIN_STATEMENTS, PluginHooks(registry))
