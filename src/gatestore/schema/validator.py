"""Schema validation for records.

validate() is pure apart from one documented side effect: declared defaults
are written into the record when the value is absent. It never touches
storage and never raises for an invalid record; it reports every problem it
finds as a field -> message mapping.
"""

from __future__ import annotations

import math
import re
import uuid
from datetime import datetime
from typing import Any, MutableMapping, NamedTuple

from gatestore.schema.fields import Field, FieldType, Schema


class ValidationResult(NamedTuple):
    """Outcome of validate(). Unpacks as ``ok, errors``."""

    ok: bool
    errors: dict[str, str]


def _is_valid_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


_TYPE_CHECKS = {
    FieldType.ID: _is_valid_id,
    FieldType.STRING: lambda v: isinstance(v, str),
    FieldType.NUMBER: lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    FieldType.BOOLEAN: lambda v: isinstance(v, bool),
    FieldType.TIMESTAMP: lambda v: isinstance(v, datetime),
    FieldType.TABLE: lambda v: isinstance(v, (dict, list)),
}


def _is_storable(value: Any) -> bool:
    """Whether value survives a JSON round trip unchanged."""
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_storable(v) for k, v in value.items())
    if isinstance(value, list):
        return all(_is_storable(v) for v in value)
    if isinstance(value, float):
        return math.isfinite(value)
    return value is None or isinstance(value, (str, int))


_TYPE_NAMES = {
    FieldType.ID: "valid id",
    FieldType.STRING: "string",
    FieldType.NUMBER: "number",
    FieldType.BOOLEAN: "boolean",
    FieldType.TIMESTAMP: "timestamp",
    FieldType.TABLE: "table",
}


def _check_present(name: str, value: Any, field: Field, record: MutableMapping[str, Any], partial: bool) -> str | None:
    """Return an error message for a present value, or None when it is valid."""
    if partial and field.immutable:
        return f"{name} cannot be updated"

    if not _TYPE_CHECKS[field.type](value):
        return f"{name} is not a {_TYPE_NAMES[field.type]}"

    if field.type is FieldType.TABLE and not _is_storable(value):
        return f"{name} holds a value that cannot be stored"

    if field.regex is not None and isinstance(value, str) and re.fullmatch(field.regex, value) is None:
        return f"{name} has an invalid value"

    if field.enum is not None and value not in field.enum:
        allowed = '", "'.join(str(v) for v in field.enum)
        return f'"{value}" is not allowed. Allowed values are: "{allowed}"'

    if field.func is not None:
        ok, message = field.func(value, record)
        if not ok:
            return message or f"{name} is invalid"

    return None


def validate(
    record: MutableMapping[str, Any],
    schema: Schema,
    partial: bool = False,
) -> ValidationResult:
    """Validate record against schema.

    Args:
        record: Candidate record. Defaults are materialized into it in place.
        schema: Field constraints to enforce.
        partial: True for updates. Absent fields mean "unchanged": required
            fields may be missing, defaults are not applied, and any
            immutable field present is rejected. A required field may be
            left out but not explicitly cleared.

    Returns:
        ValidationResult with ``ok`` and a field -> message mapping.
    """
    errors: dict[str, str] = {}

    for name, field in schema.items():
        value = record.get(name)

        if value is None or (value == "" and field.required):
            if partial:
                if field.required and name in record:
                    errors[name] = f"{name} is required"
                continue
            if field.default is not None:
                record[name] = field.materialize_default()
            elif field.required:
                errors[name] = f"{name} is required"
            elif field.func is not None:
                # Custom checks may require a field conditionally on the rest
                # of the record, so they still run for absent values.
                ok, message = field.func(None, record)
                if not ok:
                    errors[name] = message or f"{name} is invalid"
            continue

        message = _check_present(name, value, field, record, partial)
        if message is not None:
            errors[name] = message

    for name in record:
        if name not in schema:
            errors[name] = f"{name} is an unknown field"

    return ValidationResult(not errors, errors)
