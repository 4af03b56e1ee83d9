"""Tests for the plugin schema registry."""

import pytest

from gatestore.plugins import BUILTIN_SCHEMAS, default_registry
from gatestore.schema import Field, Schema, SchemaRegistry


class TestSchemaRegistry:
    def test_lookup_miss_returns_none(self):
        assert SchemaRegistry().lookup("nope") is None

    def test_register_and_lookup(self):
        registry = SchemaRegistry()
        schema = Schema({"a": Field()})
        registry.register("thing", schema)
        assert registry.lookup("thing") is schema
        assert registry.is_registered("thing")

    def test_duplicate_registration_rejected(self):
        registry = SchemaRegistry()
        registry.register("thing", Schema({}))
        with pytest.raises(ValueError, match="already registered"):
            registry.register("thing", Schema({}))

    def test_unregister(self):
        registry = SchemaRegistry()
        registry.register("thing", Schema({}))
        registry.unregister("thing")
        assert registry.lookup("thing") is None

    def test_default_registry_has_builtins(self):
        registry = default_registry()
        assert registry.names == sorted(BUILTIN_SCHEMAS)
        assert registry.lookup("authentication") is BUILTIN_SCHEMAS["authentication"]

    def test_default_registries_are_independent(self):
        first, second = default_registry(), default_registry()
        first.unregister("ratelimiting")
        assert second.is_registered("ratelimiting")
