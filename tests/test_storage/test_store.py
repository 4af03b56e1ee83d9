"""Tests for Store execution.

Covers:
- Rows come back as dicts
- Write row counts
- Multi-statement scripts
- Driver failures surface as StorageError
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from gatestore.errors import ErrorKind, StorageError
from gatestore.storage.statements import Statement


@pytest.fixture
def table(store):
    store.execute_script(
        """
        CREATE TABLE items(id TEXT PRIMARY KEY, label TEXT);
        CREATE INDEX items_label ON items(label);
        """
    )
    return store


INSERT = Statement("INSERT INTO items(id, label) VALUES(:id, :label);", ("id", "label"))
SELECT = Statement("SELECT * FROM items WHERE label = :label;", ("label",))


class TestStore:
    def test_script_creates_tables(self, table):
        assert set(table.table_names()) == {"items"}

    def test_execute_returns_dicts(self, table):
        table.execute_write(INSERT, {"id": "1", "label": "a"})
        assert table.execute(SELECT, {"label": "a"}) == [{"id": "1", "label": "a"}]

    def test_execute_write_returns_rowcount(self, table):
        table.execute_write(INSERT, {"id": "1", "label": "a"})
        table.execute_write(INSERT, {"id": "2", "label": "a"})
        deleted = table.execute_write(Statement("DELETE FROM items WHERE label = :label;", ("label",)), {"label": "a"})
        assert deleted == 2

    def test_execute_of_write_returns_no_rows(self, table):
        assert table.execute(INSERT, {"id": "1", "label": "a"}) == []

    def test_statement_error_is_storage_error(self, store):
        with pytest.raises(StorageError) as exc_info:
            store.execute(Statement("SELECT * FROM missing;"))
        assert exc_info.value.kind is ErrorKind.STORAGE
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    def test_constraint_violation_is_storage_error(self, table):
        table.execute_write(INSERT, {"id": "1", "label": "a"})
        with pytest.raises(StorageError):
            table.execute_write(INSERT, {"id": "1", "label": "b"})

    def test_script_error_is_storage_error(self, store):
        with pytest.raises(StorageError):
            store.execute_script("CREATE TABLE ok(id TEXT); THIS IS NOT SQL;")

    def test_dialect(self, store):
        assert store.dialect == "sqlite"
