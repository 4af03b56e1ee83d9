"""Configuration schema for the ratelimiting plugin."""

from __future__ import annotations

from typing import Any, Mapping

from gatestore.schema.fields import Field, FieldType, Schema

PERIODS = ("second", "minute", "hour", "day", "month", "year")


def check_limit(limit: Any, plugin_value: Mapping[str, Any]) -> tuple[bool, str | None]:
    if limit <= 0:
        return False, "limit must be a positive number"
    return True, None


SCHEMA = Schema(
    {
        "limit": Field(type=FieldType.NUMBER, required=True, func=check_limit),
        "period": Field(required=True, enum=PERIODS),
    }
)
