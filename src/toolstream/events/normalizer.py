"""
Message part normalizer - converts raw transport parts to NormalizedEvent.

This is the single place that knows about transport-specific part shapes.
Detection is an ordered priority chain because one part can match more than
one pattern (a "tool-call" part that also carries a toolName, for example):

    1. explicit toolName field       → ToolCallEvent (direct)
    2. type "tool-<backend>__<tool>" → ToolCallEvent (transport by prefix)
    3. type "text"                   → TextFragmentEvent (role undetermined)
    4. type "reasoning"              → TextFragmentEvent (reasoning)
    5. type "step-start"/"step-finish" → StructuralMarkerEvent
    6. type "resource-fetch"/"prompt-fetch" → fetch events
    7. anything else                 → None (not relevant here)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from toolstream.core.errors import InvalidToolName
from toolstream.core.records import as_mapping

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

logger = logging.getLogger(__name__)

TOOL_TYPE_PREFIX = "tool-"
TEXT_TYPE = "text"
REASONING_TYPE = "reasoning"
STRUCTURAL_TYPES = ("step-start", "step-finish")
RESOURCE_FETCH_TYPE = "resource-fetch"
PROMPT_FETCH_TYPE = "prompt-fetch"

# Wire state names seen across SDK versions
STATE_ALIASES: dict[str, ToolState] = {
    "input-streaming": ToolState.INPUT_AVAILABLE,
    "input-available": ToolState.INPUT_AVAILABLE,
    "pending": ToolState.INPUT_AVAILABLE,
    "call": ToolState.INPUT_AVAILABLE,
    "executing": ToolState.EXECUTING,
    "running": ToolState.EXECUTING,
    "completed": ToolState.COMPLETED,
    "output-available": ToolState.COMPLETED,
    "result": ToolState.COMPLETED,
    "error": ToolState.ERROR,
    "output-error": ToolState.ERROR,
}


@dataclass(frozen=True)
class TransportConventions:
    """
    Backend naming conventions used to tell transports apart.

    Prefixes are matched against the namespaced tool name
    (e.g. "uv-mcp__" matches "uv-mcp__load_csv").
    """

    local_prefixes: tuple[str, ...] = ("uv-mcp__",)
    remote_prefixes: tuple[str, ...] = ("railway-", "sleepyrat__")

    def transport_for(self, tool_name: str) -> TransportKind:
        if tool_name.startswith(self.local_prefixes):
            return TransportKind.LOCAL_PROCESS
        if tool_name.startswith(self.remote_prefixes):
            return TransportKind.STREAMING_HTTP
        return TransportKind.DIRECT


DEFAULT_CONVENTIONS = TransportConventions()


def parse_tool_name(name: str | None) -> tuple[str, str] | None:
    """
    Split a namespaced tool name into (backend, tool).

    Example:
        >>> parse_tool_name("eda-mcp__load_dataset")
        ('eda-mcp', 'load_dataset')
        >>> parse_tool_name("load_dataset") is None
        True
    """
    if not name or not isinstance(name, str):
        return None
    parts = name.split(TOOL_NAME_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def validate_tool_name(name: str | None) -> str:
    """
    Return `name` unchanged if it is a valid namespaced tool name.

    Raises:
        InvalidToolName: If the name is not exactly two non-empty segments
    """
    if parse_tool_name(name) is None:
        raise InvalidToolName(name)
    return name  # type: ignore[return-value]


def is_tool_part(part: Any) -> bool:
    """Check whether a raw part looks like a tool call on any transport."""
    record = as_mapping(part)
    if record is None:
        return False
    if record.get("toolName"):
        return True
    part_type = record.get("type")
    return isinstance(part_type, str) and part_type.startswith(TOOL_TYPE_PREFIX)


def normalize(
    part: Any,
    position: int = 0,
    conventions: TransportConventions = DEFAULT_CONVENTIONS,
) -> NormalizedEvent | None:
    """
    Normalize one raw message part.

    Args:
        part: Raw part (dict or pydantic model) from any transport
        position: Index of the part within its turn
        conventions: Backend naming conventions for transport detection

    Returns:
        The normalized event, or None if the part is not relevant here
        (unclassifiable) or carries an invalid tool name.
    """
    record = as_mapping(part)
    if record is None:
        logger.debug(f"Unclassifiable part at {position}: {type(part).__name__}")
        return None

    part_type = record.get("type")
    part_type = part_type if isinstance(part_type, str) else ""

    try:
        explicit_name = record.get("toolName")
        if explicit_name:
            return _tool_event(
                record, explicit_name, TransportKind.DIRECT, position, part_type
            )

        if part_type.startswith(TOOL_TYPE_PREFIX):
            tool_name = part_type[len(TOOL_TYPE_PREFIX) :]
            return _tool_event(
                record,
                tool_name,
                conventions.transport_for(tool_name),
                position,
                part_type,
            )
    except InvalidToolName as e:
        logger.warning(f"Dropping tool part at {position} ({part_type or 'untyped'}): {e}")
        return None

    if part_type == TEXT_TYPE:
        return TextFragmentEvent(text=_text_of(record), position=position)

    if part_type == REASONING_TYPE:
        return TextFragmentEvent(
            text=_text_of(record), role=TextRole.REASONING, position=position
        )

    if part_type in STRUCTURAL_TYPES:
        return StructuralMarkerEvent(kind=part_type, position=position)  # type: ignore[arg-type]

    if part_type == RESOURCE_FETCH_TYPE:
        return _resource_event(record, position)

    if part_type == PROMPT_FETCH_TYPE:
        return _prompt_event(record, position)

    logger.debug(f"Unclassifiable part at {position}: type={part_type!r}")
    return None


def normalize_parts(
    parts: Iterable[Any],
    conventions: TransportConventions = DEFAULT_CONVENTIONS,
) -> list[NormalizedEvent]:
    """
    Normalize a turn's parts, keeping each part's original index as position.

    Unclassifiable parts are skipped but still count towards positions, so
    positions always refer back to the raw part list.
    """
    events: list[NormalizedEvent] = []
    for idx, part in enumerate(parts):
        event = normalize(part, idx, conventions)
        if event is not None:
            events.append(event)
    return events


def tool_events(events: Iterable[NormalizedEvent]) -> list[ToolCallEvent]:
    """Filter a normalized event list down to its tool calls."""
    return [e for e in events if isinstance(e, ToolCallEvent)]


def last_tool_index(events: Sequence[NormalizedEvent]) -> int | None:
    """Position of the last tool call, or None if the turn has none."""
    last: int | None = None
    for event in events:
        if isinstance(event, ToolCallEvent):
            last = event.position
    return last


def infer_transport(backend: str) -> TransportKind:
    """
    Guess a backend's transport from its configured name.

    Local development servers default to a local process.
    """
    if "uv-mcp" in backend or "local" in backend:
        return TransportKind.LOCAL_PROCESS
    if any(marker in backend for marker in ("railway", "sleepyrat", "remote")):
        return TransportKind.STREAMING_HTTP
    return TransportKind.LOCAL_PROCESS


def _tool_event(
    record: Mapping[str, Any],
    tool_name: Any,
    transport: TransportKind,
    position: int,
    part_type: str,
) -> ToolCallEvent:
    name = validate_tool_name(tool_name if isinstance(tool_name, str) else None)

    # args/result (newer SDK) win over input/output (older SDK via mcp-use)
    args = _first_present(record, "args", "input")
    if not isinstance(args, Mapping):
        args = {}
    result = _first_present(record, "result", "output")

    error_text = record.get("errorText") or None
    state = _resolve_state(record.get("state"), result, error_text)

    return ToolCallEvent(
        tool_name=name,
        args=dict(args),
        result=result,
        state=state,
        source_transport=transport,
        position=position,
        tool_call_id=record.get("toolCallId"),
        error_text=error_text,
        original_type=part_type or "unknown",
    )


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _resolve_state(raw_state: Any, result: Any, error_text: str | None) -> ToolState:
    if isinstance(raw_state, ToolState):
        return raw_state
    if isinstance(raw_state, str) and raw_state in STATE_ALIASES:
        return STATE_ALIASES[raw_state]
    if raw_state:
        logger.debug(f"Unknown tool state {raw_state!r}, inferring from content")
    if error_text:
        return ToolState.ERROR
    return ToolState.COMPLETED if result is not None else ToolState.INPUT_AVAILABLE


def _text_of(record: Mapping[str, Any]) -> str:
    text = record.get("text")
    return text if isinstance(text, str) else ""


def _resource_event(record: Mapping[str, Any], position: int) -> ResourceFetchEvent:
    uri = str(record.get("uri") or "")
    resource = as_mapping(record.get("resource")) or {}
    name = resource.get("name") or uri.rsplit("/", 1)[-1] or uri
    return ResourceFetchEvent(
        backend=str(record.get("serverName") or ""),
        uri=uri,
        status=_fetch_status(record.get("status")),
        name=name,
        content=resource.get("content"),
        mime_type=resource.get("mimeType"),
        error=record.get("error"),
        position=position,
    )


def _prompt_event(record: Mapping[str, Any], position: int) -> PromptFetchEvent:
    prompt = as_mapping(record.get("prompt")) or {}
    args = record.get("args")
    messages = prompt.get("messages")
    return PromptFetchEvent(
        backend=str(record.get("serverName") or ""),
        prompt_name=str(record.get("promptName") or ""),
        status=_fetch_status(record.get("status")),
        args=dict(args) if isinstance(args, Mapping) else {},
        description=prompt.get("description"),
        messages=list(messages) if isinstance(messages, list) else [],
        error=record.get("error"),
        position=position,
    )


def _fetch_status(raw: Any) -> Any:
    if raw in ("fetching", "complete", "error"):
        return raw
    return "fetching"
