"""
Tool input schema sanitation. Pure: the input schema is never mutated.

Backends publish JSON schemas that strict downstream consumers reject.
Steps run in a fixed order because later ones assume earlier ones ran:

    a. drop an empty top-level "properties"
    b. object properties with no nested "properties" and no open
       "additionalProperties" get additionalProperties: true
    c. array properties with an empty "items" lose "items"
    d. strip credential parameters from "properties" and "required"
    e. re-apply (a), since (d) can empty "properties"
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

logger = logging.getLogger(__name__)


def sanitize_schema(
    schema: dict[str, Any] | None,
    strip_params: Iterable[str] = (),
) -> tuple[dict[str, Any], tuple[str, ...]]:
    """
    Sanitize a tool input schema.

    Args:
        schema: Raw JSON schema from the backend (not modified)
        strip_params: Parameter names to remove (credentials carried out of band)

    Returns:
        Tuple of (sanitized schema copy, names actually stripped)

    Example:
        >>> sanitize_schema({"properties": {"x": {"type": "object"}}})[0]
        {'properties': {'x': {'type': 'object', 'additionalProperties': True}}}
    """
    result = copy.deepcopy(schema) if schema else {}

    _drop_empty_properties(result)
    _open_object_properties(result)
    _drop_empty_array_items(result)
    stripped = _strip_params(result, strip_params)
    _drop_empty_properties(result)

    return result, stripped


def _drop_empty_properties(schema: dict[str, Any]) -> None:
    if "properties" in schema and not schema["properties"]:
        del schema["properties"]


def _properties(schema: dict[str, Any]) -> dict[str, Any]:
    properties = schema.get("properties")
    return properties if isinstance(properties, dict) else {}


def _open_object_properties(schema: dict[str, Any]) -> None:
    for key, prop in _properties(schema).items():
        if not isinstance(prop, dict) or not _has_type(prop, "object"):
            continue
        if "properties" in prop or _is_open(prop.get("additionalProperties")):
            continue
        logger.debug(f"Adding additionalProperties to {key}")
        prop["additionalProperties"] = True


def _drop_empty_array_items(schema: dict[str, Any]) -> None:
    for key, prop in _properties(schema).items():
        if not isinstance(prop, dict) or not _has_type(prop, "array"):
            continue
        if "items" in prop and prop["items"] == {}:
            logger.debug(f"Removing empty items object from array {key}")
            del prop["items"]


def _strip_params(schema: dict[str, Any], names: Iterable[str]) -> tuple[str, ...]:
    properties = _properties(schema)
    stripped = tuple(name for name in names if name in properties)
    if not stripped:
        return ()

    for name in stripped:
        del properties[name]

    required = schema.get("required")
    if isinstance(required, list):
        remaining = [r for r in required if r not in stripped]
        if remaining:
            schema["required"] = remaining
        else:
            del schema["required"]

    return stripped


def _has_type(prop: dict[str, Any], type_name: str) -> bool:
    declared = prop.get("type")
    if isinstance(declared, list):
        return type_name in declared
    return declared == type_name


def _is_open(additional: Any) -> bool:
    return additional is True or isinstance(additional, dict)
