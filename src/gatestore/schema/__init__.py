"""Field schemas, record validation, and the plugin schema registry."""

from gatestore.schema.fields import Field, FieldCheck, FieldType, Schema
from gatestore.schema.registry import SchemaRegistry
from gatestore.schema.validator import ValidationResult, validate

__all__ = [
    "Field",
    "FieldCheck",
    "FieldType",
    "Schema",
    "SchemaRegistry",
    "ValidationResult",
    "validate",
]
