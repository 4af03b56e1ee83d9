"""Configuration schema for the authentication plugin."""

from __future__ import annotations

from typing import Any, Mapping

from gatestore.schema.fields import Field, FieldType, Schema

QUERY = "query"
BASIC = "basic"
HEADER = "header"


def check_authentication_key_names(names: Any, plugin_value: Mapping[str, Any]) -> tuple[bool, str | None]:
    """Key names are required for query/header authentication, refused for basic."""
    if plugin_value.get("authentication_type") == BASIC:
        if names is not None:
            return False, f'This field is not available for "{BASIC}" authentication'
        return True, None
    if names is None:
        return False, "This field is required for query and header authentication"
    if not isinstance(names, list):
        return False, "You need to specify an array"
    return True, None


SCHEMA = Schema(
    {
        "authentication_type": Field(required=True, immutable=True, enum=(QUERY, BASIC, HEADER)),
        "authentication_key_names": Field(type=FieldType.TABLE, func=check_authentication_key_names),
        "hide_credentials": Field(type=FieldType.BOOLEAN, default=False),
    }
)
