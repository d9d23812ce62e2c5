"""
Normalized event types for heterogeneous message parts.

Three transports describe the same conversation with different part shapes:

    local process (stdio)     {"type": "tool-uv-mcp__load", "args": ..., "result": ...}
    streaming HTTP (SSE)      {"type": "tool-railway-x__q", "input": ..., "output": ...}
    direct / in-process       {"type": "tool-call", "toolName": "a__b", "args": ...}

Everything downstream (phase classification, the data-context ledger, the
rendering layer) only ever sees the variants defined here:

    Raw parts → normalize() → NormalizedEvent → classify() / update_ledger()
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal

from toolstream.core.errors import InvalidStateTransition

TOOL_NAME_SEPARATOR = "__"


class ToolState(str, Enum):
    """Lifecycle of one tool call. Moves forward only."""

    INPUT_AVAILABLE = "input-available"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ToolState.COMPLETED, ToolState.ERROR)


# Legal forward moves; terminal states have none
_TRANSITIONS: dict[ToolState, frozenset[ToolState]] = {
    ToolState.INPUT_AVAILABLE: frozenset(
        {ToolState.EXECUTING, ToolState.COMPLETED, ToolState.ERROR}
    ),
    ToolState.EXECUTING: frozenset({ToolState.COMPLETED, ToolState.ERROR}),
    ToolState.COMPLETED: frozenset(),
    ToolState.ERROR: frozenset(),
}


class TransportKind(str, Enum):
    """Transport a tool-call part arrived over."""

    LOCAL_PROCESS = "local-process"
    STREAMING_HTTP = "streaming-http"
    DIRECT = "direct"


class TextRole(str, Enum):
    """Role of a text fragment within a turn."""

    REASONING = "reasoning"
    FINAL_ANSWER = "final-answer"


FetchStatus = Literal["fetching", "complete", "error"]


@dataclass(frozen=True)
class ToolCallEvent:
    """
    One tool invocation as seen in the message stream.

    `tool_name` is always "<backend>__<tool>"; the normalizer drops parts
    whose names do not have that shape.
    """

    type: Literal["tool_call"] = field(default="tool_call", init=False)
    tool_name: str
    args: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    state: ToolState = ToolState.INPUT_AVAILABLE
    source_transport: TransportKind = TransportKind.DIRECT
    position: int = 0
    tool_call_id: str | None = None
    error_text: str | None = None
    original_type: str = "unknown"

    @property
    def backend(self) -> str:
        return self.tool_name.split(TOOL_NAME_SEPARATOR, 1)[0]

    @property
    def original_name(self) -> str:
        return self.tool_name.split(TOOL_NAME_SEPARATOR, 1)[1]

    @property
    def has_result(self) -> bool:
        return self.result is not None

    @property
    def has_error(self) -> bool:
        """True when the call failed, by state, error text or error-shaped result."""
        if self.state is ToolState.ERROR or self.error_text:
            return True
        if isinstance(self.result, dict):
            return bool(self.result.get("error") or self.result.get("isError"))
        return False

    @property
    def error_message(self) -> str | None:
        if not self.has_error:
            return None
        if self.error_text:
            return self.error_text
        if isinstance(self.result, dict) and self.result.get("error"):
            return str(self.result["error"])
        if isinstance(self.result, str) and self.result:
            return self.result
        return "Unknown error occurred"

    def transition(
        self,
        state: ToolState,
        *,
        result: Any = None,
        error_text: str | None = None,
    ) -> ToolCallEvent:
        """
        Return a copy of this event moved to `state`.

        Raises:
            InvalidStateTransition: If `state` is not a forward move
        """
        if state not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(self.state.value, state.value)
        return replace(
            self,
            state=state,
            result=result if result is not None else self.result,
            error_text=error_text if error_text is not None else self.error_text,
        )


@dataclass(frozen=True)
class TextFragmentEvent:
    """
    A text or reasoning fragment.

    `role` is None for plain text parts; the phase classifier decides
    whether such a fragment is reasoning or the final answer.
    """

    type: Literal["text"] = field(default="text", init=False)
    text: str
    role: TextRole | None = None
    position: int = 0


@dataclass(frozen=True)
class StructuralMarkerEvent:
    """A step boundary emitted while streaming."""

    type: Literal["marker"] = field(default="marker", init=False)
    kind: Literal["step-start", "step-finish"]
    position: int = 0


@dataclass(frozen=True)
class ResourceFetchEvent:
    """A backend resource read surfaced in the conversation."""

    type: Literal["resource_fetch"] = field(default="resource_fetch", init=False)
    backend: str
    uri: str
    status: FetchStatus
    name: str = ""
    content: str | None = None
    mime_type: str | None = None
    error: str | None = None
    position: int = 0


@dataclass(frozen=True)
class PromptFetchEvent:
    """A backend prompt template retrieval surfaced in the conversation."""

    type: Literal["prompt_fetch"] = field(default="prompt_fetch", init=False)
    backend: str
    prompt_name: str
    status: FetchStatus
    args: dict[str, Any] = field(default_factory=dict)
    description: str | None = None
    messages: list[dict[str, str]] = field(default_factory=list)
    error: str | None = None
    position: int = 0


# Union type for all normalized events
NormalizedEvent = (
    ToolCallEvent
    | TextFragmentEvent
    | StructuralMarkerEvent
    | ResourceFetchEvent
    | PromptFetchEvent
)
