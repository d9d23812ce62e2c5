"""
Event normalization for heterogeneous transport message parts.

Example:
    from toolstream.events import normalize_parts, ToolCallEvent

    events = normalize_parts(message["parts"])
    calls = [e for e in events if isinstance(e, ToolCallEvent)]
"""

from .normalizer import (
    DEFAULT_CONVENTIONS,
    STATE_ALIASES,
    TransportConventions,
    infer_transport,
    is_tool_part,
    last_tool_index,
    normalize,
    normalize_parts,
    parse_tool_name,
    tool_events,
    validate_tool_name,
)
from .types import (
    TOOL_NAME_SEPARATOR,
    NormalizedEvent,
    PromptFetchEvent,
    ResourceFetchEvent,
    StructuralMarkerEvent,
    TextFragmentEvent,
    TextRole,
    ToolCallEvent,
    ToolState,
    TransportKind,
)

__all__ = [
    "normalize",
    "normalize_parts",
    "is_tool_part",
    "tool_events",
    "last_tool_index",
    "parse_tool_name",
    "validate_tool_name",
    "infer_transport",
    "TransportConventions",
    "DEFAULT_CONVENTIONS",
    "STATE_ALIASES",
    "TOOL_NAME_SEPARATOR",
    "NormalizedEvent",
    "ToolCallEvent",
    "TextFragmentEvent",
    "StructuralMarkerEvent",
    "ResourceFetchEvent",
    "PromptFetchEvent",
    "ToolState",
    "TransportKind",
    "TextRole",
]
