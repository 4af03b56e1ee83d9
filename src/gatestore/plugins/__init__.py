"""Built-in plugin configuration schemas."""

from __future__ import annotations

from gatestore.plugins import authentication, ratelimiting
from gatestore.schema.registry import SchemaRegistry

BUILTIN_SCHEMAS = {
    "authentication": authentication.SCHEMA,
    "ratelimiting": ratelimiting.SCHEMA,
}


def default_registry() -> SchemaRegistry:
    """A new registry holding every built-in plugin schema."""
    registry = SchemaRegistry()
    for name, schema in BUILTIN_SCHEMAS.items():
        registry.register(name, schema)
    return registry
