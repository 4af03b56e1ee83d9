"""Tests for the generic Repository.

Covers:
- Insert generates identifiers and materializes defaults
- Validation failures never reach storage
- Partial updates, immutable fields, missing records
- Foreign key checks
- Select filters and exists_matching
- Hook wiring (identity vs schema-driven)
"""

import uuid

import pytest

from gatestore.dao.repository import IdentityHooks, Repository, SchemaHooks
from gatestore.errors import ForeignKeyError, SchemaError, UniqueConstraintError
from gatestore.schema import Field, FieldType, Schema
from gatestore.storage.statements import Statement, StatementSet

ENTITY_SCHEMA = Schema(
    {
        "id": Field(type=FieldType.ID, required=True),
        "name": Field(required=True, immutable=True, queryable=True),
        "enabled": Field(type=FieldType.BOOLEAN, default=True, queryable=True),
        "owner_id": Field(type=FieldType.ID, foreign=True, references="owners"),
        "tags": Field(type=FieldType.TABLE),
        "slug": Field(unique=True),
    },
    primary_key="id",
)

ENTITY_STATEMENTS = StatementSet(
    insert=Statement(
        "INSERT INTO entities(id, name, enabled, owner_id, tags, slug) "
        "VALUES(:id, :name, :enabled, :owner_id, :tags, :slug);",
        ("id", "name", "enabled", "owner_id", "tags", "slug"),
    ),
    update=Statement(
        "UPDATE entities SET enabled = :enabled, owner_id = :owner_id, tags = :tags, slug = :slug "
        "WHERE id = :id AND name = :name;",
        ("enabled", "owner_id", "tags", "slug", "id", "name"),
    ),
    select=Statement("SELECT * FROM entities"),
    select_one=Statement("SELECT * FROM entities WHERE id = :id;", ("id",)),
    delete=Statement("DELETE FROM entities WHERE id = :id;", ("id",)),
    custom_checks={
        "unique_slug": Statement("SELECT id FROM entities WHERE slug = :slug;", ("slug",)),
    },
    foreign={
        "owner_id": Statement("SELECT id FROM owners WHERE id = :owner_id;", ("owner_id",)),
    },
)


@pytest.fixture
def tables(store):
    store.execute_script(
        """
        CREATE TABLE owners(id TEXT PRIMARY KEY);
        CREATE TABLE entities(
          id TEXT PRIMARY KEY, name TEXT, enabled INTEGER, owner_id TEXT, tags TEXT, slug TEXT
        );
        """
    )
    return store


@pytest.fixture
def repo(tables) -> Repository:
    return Repository(tables, "entities", ENTITY_SCHEMA, ENTITY_STATEMENTS, SchemaHooks(ENTITY_SCHEMA))


@pytest.fixture
def owner_id(tables) -> str:
    key = str(uuid.uuid4())
    tables.execute_write(Statement("INSERT INTO owners(id) VALUES(:id);", ("id",)), {"id": key})
    return key


def _count(store) -> int:
    return store.execute(Statement("SELECT COUNT(*) AS n FROM entities;"))[0]["n"]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_requires_primary_key(self, store):
        with pytest.raises(ValueError, match="no primary key"):
            Repository(store, "x", Schema({"a": Field()}), ENTITY_STATEMENTS)

    def test_requires_foreign_statement(self, store):
        statements = StatementSet(
            insert=ENTITY_STATEMENTS.insert,
            update=ENTITY_STATEMENTS.update,
            select=ENTITY_STATEMENTS.select,
            select_one=ENTITY_STATEMENTS.select_one,
            delete=ENTITY_STATEMENTS.delete,
        )
        with pytest.raises(ValueError, match="owner_id"):
            Repository(store, "entities", ENTITY_SCHEMA, statements)

    def test_default_hooks_are_identity(self, tables):
        repo = Repository(tables, "entities", ENTITY_SCHEMA, ENTITY_STATEMENTS)
        assert isinstance(repo.hooks, IdentityHooks)


# ---------------------------------------------------------------------------
# Insert
# ---------------------------------------------------------------------------


class TestInsert:
    def test_scenario_insert_generates_id_and_default(self, repo):
        record = repo.insert({"name": "x"})
        assert uuid.UUID(record["id"])
        assert record["name"] == "x"
        assert record["enabled"] is True
        assert repo.select_one(record["id"]) == record

    def test_caller_record_is_not_mutated(self, repo):
        given = {"name": "x"}
        repo.insert(given)
        assert given == {"name": "x"}

    def test_keeps_supplied_id(self, repo):
        key = str(uuid.uuid4())
        assert repo.insert({"id": key, "name": "x"})["id"] == key

    def test_schema_error_does_not_touch_storage(self, repo, tables):
        with pytest.raises(SchemaError) as exc_info:
            repo.insert({"enabled": "maybe"})
        assert set(exc_info.value.errors) == {"name", "enabled"}
        assert _count(tables) == 0

    def test_missing_foreign_reference(self, repo, tables):
        missing = str(uuid.uuid4())
        with pytest.raises(ForeignKeyError) as exc_info:
            repo.insert({"name": "x", "owner_id": missing})
        assert exc_info.value.field == "owner_id"
        assert exc_info.value.value == missing
        assert _count(tables) == 0

    def test_existing_foreign_reference(self, repo, owner_id):
        assert repo.insert({"name": "x", "owner_id": owner_id})["owner_id"] == owner_id

    def test_unique_field(self, repo):
        repo.insert({"name": "a", "slug": "same"})
        with pytest.raises(UniqueConstraintError) as exc_info:
            repo.insert({"name": "b", "slug": "same"})
        assert exc_info.value.field == "slug"

    def test_structured_value_round_trip(self, repo):
        tags = {"colors": ["red", "blue"], "nested": {"n": 1, "ok": True}}
        record = repo.insert({"name": "x", "tags": tags})
        assert repo.select_one(record["id"])["tags"] == tags

    def test_structured_value_is_stored_as_text(self, repo, tables):
        record = repo.insert({"name": "x", "tags": ["a"]})
        raw = tables.execute(ENTITY_STATEMENTS.select_one, {"id": record["id"]})[0]
        assert raw["tags"] == '["a"]'
        assert raw["enabled"] == 1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_scenario_update_of_immutable_field_fails(self, repo):
        record = repo.insert({"name": "x"})
        with pytest.raises(SchemaError) as exc_info:
            repo.update({"id": record["id"], "name": "y"})
        assert exc_info.value.errors == {"name": "name cannot be updated"}
        assert repo.select_one(record["id"])["name"] == "x"

    def test_partial_update_keeps_other_fields(self, repo):
        record = repo.insert({"name": "x", "tags": ["a"]})
        updated = repo.update({"id": record["id"], "enabled": False})
        assert updated == {**record, "enabled": False}
        assert repo.select_one(record["id"]) == updated

    def test_update_requires_primary_key(self, repo):
        with pytest.raises(SchemaError) as exc_info:
            repo.update({"enabled": False})
        assert "id" in exc_info.value.errors

    def test_update_missing_record_returns_none(self, repo):
        assert repo.update({"id": str(uuid.uuid4()), "enabled": False}) is None

    def test_update_checks_foreign(self, repo):
        record = repo.insert({"name": "x"})
        with pytest.raises(ForeignKeyError):
            repo.update({"id": record["id"], "owner_id": str(uuid.uuid4())})

    def test_update_keeping_unique_value_is_allowed(self, repo):
        record = repo.insert({"name": "a", "slug": "mine"})
        assert repo.update({"id": record["id"], "slug": "mine", "enabled": False})["enabled"] is False

    def test_update_to_taken_unique_value_fails(self, repo):
        repo.insert({"name": "a", "slug": "taken"})
        other = repo.insert({"name": "b", "slug": "free"})
        with pytest.raises(UniqueConstraintError):
            repo.update({"id": other["id"], "slug": "taken"})


# ---------------------------------------------------------------------------
# Reads and delete
# ---------------------------------------------------------------------------


class TestReads:
    def test_select_one_missing(self, repo):
        assert repo.select_one(str(uuid.uuid4())) is None

    def test_select_all(self, repo):
        repo.insert({"name": "a"})
        repo.insert({"name": "b"})
        assert sorted(r["name"] for r in repo.select()) == ["a", "b"]

    def test_select_filter(self, repo):
        repo.insert({"name": "a"})
        repo.insert({"name": "b", "enabled": False})
        assert [r["name"] for r in repo.select({"enabled": False})] == ["b"]
        assert [r["name"] for r in repo.select({"name": "a"})] == ["a"]

    def test_select_limit(self, repo):
        for name in "abc":
            repo.insert({"name": name})
        assert len(repo.select(limit=2)) == 2

    def test_select_non_queryable_field(self, repo):
        with pytest.raises(SchemaError) as exc_info:
            repo.select({"tags": [], "nope": 1})
        assert exc_info.value.errors == {
            "tags": "tags is not queryable",
            "nope": "nope is not queryable",
        }

    def test_exists_matching(self, repo):
        record = repo.insert({"name": "a", "slug": "s"})
        assert repo.exists_matching("unique_slug", {"slug": "s"})
        assert not repo.exists_matching("unique_slug", {"slug": "s"}, excluding_id=record["id"])
        assert not repo.exists_matching("unique_slug", {"slug": "other"})

    def test_exists_matching_unknown_check(self, repo):
        with pytest.raises(ValueError, match="no custom check"):
            repo.exists_matching("unique_nothing", {})

    def test_delete(self, repo):
        record = repo.insert({"name": "a"})
        assert repo.delete(record["id"]) is True
        assert repo.select_one(record["id"]) is None
        assert repo.delete(record["id"]) is False

    def test_invalid_serialized_value_on_read(self, repo, tables):
        key = str(uuid.uuid4())
        tables.execute_write(ENTITY_STATEMENTS.insert, {"id": key, "name": "x", "tags": "{not json"})
        with pytest.raises(SchemaError) as exc_info:
            repo.select_one(key)
        assert "tags" in exc_info.value.errors
