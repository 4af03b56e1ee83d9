"""Registry of plugin configuration schemas.

Populated once at process start and queried by name. A lookup miss returns
None; callers decide how to report it.
"""

from __future__ import annotations

from gatestore.schema.fields import Schema


class SchemaRegistry:
    """Mapping from plugin name to the schema its configuration must satisfy."""

    def __init__(self) -> None:
        self._schemas: dict[str, Schema] = {}

    def register(self, name: str, schema: Schema) -> None:
        """Register a schema under name.

        Raises ValueError if the name is already registered.
        """
        if name in self._schemas:
            raise ValueError(f"Schema '{name}' is already registered.")
        self._schemas[name] = schema

    def unregister(self, name: str) -> None:
        self._schemas.pop(name, None)

    def lookup(self, name: str) -> Schema | None:
        return self._schemas.get(name)

    def is_registered(self, name: str) -> bool:
        return name in self._schemas

    @property
    def names(self) -> list[str]:
        """All registered names, sorted."""
        return sorted(self._schemas)
