"""Tests for statement templates.

Covers:
- Declared params must match placeholders, in order
- Binding follows declared order
- Filtered select statements
"""

import pytest

from gatestore.storage.statements import Statement, placeholders


class TestPlaceholders:
    def test_order_of_first_appearance(self):
        query = "SELECT * FROM t WHERE b = :b AND a = :a OR b = :b"
        assert placeholders(query) == ("b", "a")

    def test_ignores_casts_and_escapes(self):
        assert placeholders("SELECT x::text FROM t WHERE y = :y") == ("y",)


class TestStatement:
    def test_matching_params(self):
        stmt = Statement("DELETE FROM t WHERE id = :id;", ("id",))
        assert stmt.params == ("id",)

    def test_list_params_are_frozen_to_tuple(self):
        stmt = Statement("DELETE FROM t WHERE id = :id;", ["id"])
        assert stmt.params == ("id",)

    def test_missing_param_rejected(self):
        with pytest.raises(ValueError, match="do not match"):
            Statement("UPDATE t SET a = :a WHERE id = :id;", ("id",))

    def test_wrong_order_rejected(self):
        with pytest.raises(ValueError, match="do not match"):
            Statement("UPDATE t SET a = :a WHERE id = :id;", ("id", "a"))

    def test_bind_follows_declared_order(self):
        stmt = Statement("UPDATE t SET a = :a, b = :b WHERE id = :id;", ("a", "b", "id"))
        bound = stmt.bind({"id": "1", "b": 2, "a": 1, "ignored": True})
        assert list(bound.items()) == [("a", 1), ("b", 2), ("id", "1")]

    def test_bind_missing_value_is_none(self):
        stmt = Statement("SELECT * FROM t WHERE a = :a;", ("a",))
        assert stmt.bind({}) == {"a": None}

    def test_filtered(self):
        stmt = Statement("SELECT * FROM plugins;").filtered(["api_id", "name"], limit=10)
        assert stmt.query == "SELECT * FROM plugins WHERE api_id = :api_id AND name = :name LIMIT 10"
        assert stmt.params == ("api_id", "name")

    def test_filtered_without_criteria(self):
        stmt = Statement("SELECT * FROM plugins").filtered([])
        assert stmt.query == "SELECT * FROM plugins"
        assert stmt.params == ()
