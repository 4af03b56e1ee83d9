"""Field descriptors and schemas.

A Schema is an ordered, read-only mapping from field name to Field. Entity
schemas name exactly one primary key; plugin configuration schemas have none.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional, Tuple

# (value, whole_record) -> (ok, message)
FieldCheck = Callable[[Any, Mapping[str, Any]], Tuple[bool, Optional[str]]]


class FieldType(str, enum.Enum):
    """Semantic type of a field."""

    ID = "id"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    TABLE = "table"


@dataclass(frozen=True)
class Field:
    """Constraints declared for a single field.

    ``default`` may be a plain value or a zero-argument callable evaluated
    each time the default is materialized. ``references`` names the entity
    whose identifier space a ``foreign`` field points into.
    """

    type: FieldType = FieldType.STRING
    required: bool = False
    immutable: bool = False
    queryable: bool = False
    foreign: bool = False
    references: str | None = None
    unique: bool = False
    default: Any = None
    enum: tuple | None = None
    regex: str | None = None
    func: FieldCheck | None = None

    def __post_init__(self) -> None:
        if self.foreign and self.references is None:
            raise ValueError("foreign fields must name the entity they reference")
        if self.enum is not None and not isinstance(self.enum, tuple):
            object.__setattr__(self, "enum", tuple(self.enum))

    def materialize_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default


class Schema(Mapping[str, Field]):
    """Ordered mapping of field name to Field."""

    def __init__(self, fields: Mapping[str, Field], *, primary_key: str | None = None) -> None:
        self._fields: dict[str, Field] = dict(fields)
        if primary_key is not None:
            if primary_key not in self._fields:
                raise ValueError(f"primary key {primary_key!r} is not a declared field")
            if self._fields[primary_key].type is not FieldType.ID:
                raise ValueError(f"primary key {primary_key!r} must be an id field")
        self.primary_key = primary_key

    def __getitem__(self, name: str) -> Field:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({list(self._fields)!r}, primary_key={self.primary_key!r})"

    def names_where(self, predicate: Callable[[Field], bool]) -> list[str]:
        """Field names, in declaration order, whose Field satisfies predicate."""
        return [name for name, f in self._fields.items() if predicate(f)]
