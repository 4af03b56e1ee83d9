"""Accounts, applications, and APIs.

These entities need nothing beyond the schema-driven hooks: typed
(de)serialization, single-field uniqueness, and the generic foreign checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from gatestore.dao.repository import Repository, SchemaHooks
from gatestore.schema.fields import Field, FieldType, Schema
from gatestore.storage.statements import Statement, StatementSet

if TYPE_CHECKING:
    from gatestore.storage.engine import Store


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

ACCOUNT_SCHEMA = Schema(
    {
        "id": Field(type=FieldType.ID),
        "provider_id": Field(unique=True, queryable=True),
        "created_at": Field(type=FieldType.TIMESTAMP, default=utcnow),
    },
    primary_key="id",
)

ACCOUNT_STATEMENTS = StatementSet(
    insert=Statement(
        "INSERT INTO accounts(id, provider_id, created_at) VALUES(:id, :provider_id, :created_at);",
        ("id", "provider_id", "created_at"),
    ),
    update=Statement(
        "UPDATE accounts SET provider_id = :provider_id, created_at = :created_at WHERE id = :id;",
        ("provider_id", "created_at", "id"),
    ),
    select=Statement("SELECT * FROM accounts"),
    select_one=Statement("SELECT * FROM accounts WHERE id = :id;", ("id",)),
    delete=Statement("DELETE FROM accounts WHERE id = :id;", ("id",)),
    custom_checks={
        "unique_provider_id": Statement(
            "SELECT id FROM accounts WHERE provider_id = :provider_id;",
            ("provider_id",),
        ),
    },
)


def create_account_repository(store: Store) -> Repository:
    return Repository(store, "accounts", ACCOUNT_SCHEMA, ACCOUNT_STATEMENTS, SchemaHooks(ACCOUNT_SCHEMA))


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------

APPLICATION_SCHEMA = Schema(
    {
        "id": Field(type=FieldType.ID),
        "account_id": Field(
            type=FieldType.ID, required=True, foreign=True, references="accounts", queryable=True
        ),
        "public_key": Field(required=True, unique=True, queryable=True),
        "secret_key": Field(),
        "created_at": Field(type=FieldType.TIMESTAMP, default=utcnow),
    },
    primary_key="id",
)

APPLICATION_STATEMENTS = StatementSet(
    insert=Statement(
        "INSERT INTO applications(id, account_id, public_key, secret_key, created_at) "
        "VALUES(:id, :account_id, :public_key, :secret_key, :created_at);",
        ("id", "account_id", "public_key", "secret_key", "created_at"),
    ),
    update=Statement(
        "UPDATE applications SET account_id = :account_id, public_key = :public_key, "
        "secret_key = :secret_key, created_at = :created_at WHERE id = :id;",
        ("account_id", "public_key", "secret_key", "created_at", "id"),
    ),
    select=Statement("SELECT * FROM applications"),
    select_one=Statement("SELECT * FROM applications WHERE id = :id;", ("id",)),
    delete=Statement("DELETE FROM applications WHERE id = :id;", ("id",)),
    custom_checks={
        "unique_public_key": Statement(
            "SELECT id FROM applications WHERE public_key = :public_key;",
            ("public_key",),
        ),
    },
    foreign={
        "account_id": Statement("SELECT id FROM accounts WHERE id = :account_id;", ("account_id",)),
    },
)


def create_application_repository(store: Store) -> Repository:
    return Repository(
        store, "applications", APPLICATION_SCHEMA, APPLICATION_STATEMENTS, SchemaHooks(APPLICATION_SCHEMA)
    )


# ---------------------------------------------------------------------------
# APIs
# ---------------------------------------------------------------------------

HOSTNAME_REGEX = r"[A-Za-z0-9]([A-Za-z0-9\-]*[A-Za-z0-9])?(\.[A-Za-z0-9]([A-Za-z0-9\-]*[A-Za-z0-9])?)*(:\d+)?"
URL_REGEX = r"https?://[^\s/$.?#][^\s]*"

API_SCHEMA = Schema(
    {
        "id": Field(type=FieldType.ID),
        "name": Field(required=True, unique=True, queryable=True),
        "public_dns": Field(required=True, unique=True, queryable=True, regex=HOSTNAME_REGEX),
        "target_url": Field(required=True, regex=URL_REGEX),
        "created_at": Field(type=FieldType.TIMESTAMP, default=utcnow),
    },
    primary_key="id",
)

API_STATEMENTS = StatementSet(
    insert=Statement(
        "INSERT INTO apis(id, name, public_dns, target_url, created_at) "
        "VALUES(:id, :name, :public_dns, :target_url, :created_at);",
        ("id", "name", "public_dns", "target_url", "created_at"),
    ),
    update=Statement(
        "UPDATE apis SET name = :name, public_dns = :public_dns, target_url = :target_url, "
        "created_at = :created_at WHERE id = :id;",
        ("name", "public_dns", "target_url", "created_at", "id"),
    ),
    select=Statement("SELECT * FROM apis"),
    select_one=Statement("SELECT * FROM apis WHERE id = :id;", ("id",)),
    delete=Statement("DELETE FROM apis WHERE id = :id;", ("id",)),
    custom_checks={
        "unique_name": Statement("SELECT id FROM apis WHERE name = :name;", ("name",)),
        "unique_public_dns": Statement(
            "SELECT id FROM apis WHERE public_dns = :public_dns;", ("public_dns",)
        ),
    },
)


def create_api_repository(store: Store) -> Repository:
    return Repository(store, "apis", API_SCHEMA, API_STATEMENTS, SchemaHooks(API_SCHEMA))
