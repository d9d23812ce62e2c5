"""Render backend tool results to the single string handed back to the model."""

from __future__ import annotations

import json
from typing import Any

from toolstream.core.records import as_mapping, get_field


def format_call_result(result: Any) -> str:
    """
    Format a tool call result.

    Text items pass through verbatim; other items become short bracketed
    placeholders. Items are joined with newlines in their original order.
    A result without a content list is serialized as JSON.

    Example:
        >>> format_call_result({"content": [
        ...     {"type": "text", "text": "rows: 3"},
        ...     {"type": "image", "data": "...", "mimeType": "image/png"},
        ... ]})
        'rows: 3\\n[Image: image/png]'
    """
    record = as_mapping(result)
    content = record.get("content") if record is not None else None
    if not isinstance(content, list):
        if isinstance(result, str):
            return result
        return json.dumps(dict(record) if record is not None else result, default=str)

    return "\n".join(format_content_item(item) for item in content)


def format_content_item(item: Any) -> str:
    """Render one content item; never includes raw binary data."""
    record = as_mapping(item) or {}
    item_type = record.get("type")

    if item_type == "text":
        return str(record.get("text", ""))
    if item_type == "image":
        return f"[Image: {record.get('mimeType') or 'unknown'}]"
    if item_type == "audio":
        return f"[Audio: {record.get('mimeType') or 'unknown'}]"
    if item_type == "resource":
        uri = get_field(record.get("resource") or {}, "uri")
        return f"[Resource: {uri or 'unknown'}]"
    if item_type == "resource_link":
        return f"[Resource link: {record.get('uri') or 'unknown'}]"
    return f"[{str(item_type or 'unknown').capitalize()} content]"


def is_error_result(result: Any) -> bool:
    """True when the backend flagged the result itself as an error."""
    record = as_mapping(result)
    if record is None:
        return False
    return bool(record.get("isError") or record.get("is_error"))


def dispatch_error_payload(tool: str, backend: str, message: str) -> str:
    """Structured error string returned in place of a tool result."""
    return json.dumps({"error": message, "tool": tool, "backend": backend})
