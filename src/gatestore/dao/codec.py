"""Schema-driven conversion between records and storage rows.

Structured values are stored as JSON text, booleans as integers, and
timestamps as ISO-8601 text. Decoding drops NULL columns so that a field the
caller never set comes back absent rather than as None.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping

from gatestore.errors import SchemaError
from gatestore.schema.fields import FieldType, Schema


def encode_value(field_type: FieldType, value: Any) -> Any:
    if value is None:
        return None
    if field_type is FieldType.TABLE:
        return json.dumps(value, sort_keys=True, allow_nan=False)
    if field_type is FieldType.BOOLEAN:
        return int(bool(value))
    if field_type is FieldType.TIMESTAMP and isinstance(value, datetime):
        return value.isoformat()
    return value


def decode_value(field_type: FieldType, raw: Any) -> Any:
    if raw is None:
        return None
    if field_type is FieldType.TABLE and isinstance(raw, str):
        return json.loads(raw)
    if field_type is FieldType.BOOLEAN:
        return bool(raw)
    if field_type is FieldType.TIMESTAMP and isinstance(raw, str):
        return datetime.fromisoformat(raw)
    return raw


def encode_row(record: Mapping[str, Any], schema: Schema) -> dict[str, Any]:
    """Convert an in-memory record into a storage row.

    Raises SchemaError if a value cannot be serialized.
    """
    row: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for name, value in record.items():
        field = schema.get(name)
        if field is None:
            row[name] = value
            continue
        try:
            row[name] = encode_value(field.type, value)
        except (TypeError, ValueError):
            errors[name] = f"{name} cannot be serialized"
    if errors:
        raise SchemaError(errors)
    return row


def decode_row(row: Mapping[str, Any], schema: Schema) -> dict[str, Any]:
    """Convert a storage row into an in-memory record.

    Raises SchemaError if a structured column holds text that is not valid
    JSON.
    """
    record: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for name, raw in row.items():
        if raw is None:
            continue
        field = schema.get(name)
        if field is None:
            record[name] = raw
            continue
        try:
            record[name] = decode_value(field.type, raw)
        except ValueError:  # includes json.JSONDecodeError
            errors[name] = f"{name} holds invalid serialized data"
    if errors:
        raise SchemaError(errors)
    return record
