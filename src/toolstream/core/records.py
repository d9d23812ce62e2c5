"""Field access over loosely-typed wire records.

Transports hand us plain dicts, pydantic models (the MCP SDK types) or
arbitrary objects. These helpers give every caller the same view.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def as_mapping(record: Any) -> Mapping[str, Any] | None:
    """
    Return a read-only mapping view of a wire record.

    Args:
        record: dict, pydantic model, or None

    Returns:
        The mapping, or None if the record has no dict shape
    """
    if isinstance(record, Mapping):
        return record
    dump = getattr(record, "model_dump", None)
    if callable(dump):
        dumped = dump(by_alias=True, exclude_none=True)
        if isinstance(dumped, Mapping):
            return dumped
    return None


def get_field(record: Any, *names: str, default: Any = None) -> Any:
    """Return the first present, non-None field among `names`."""
    if isinstance(record, Mapping):
        for name in names:
            value = record.get(name)
            if value is not None:
                return value
        return default
    for name in names:
        value = getattr(record, name, None)
        if value is not None:
            return value
    return default
