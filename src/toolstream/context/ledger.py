"""
Data-context ledger - what earlier turns already fetched.

The ledger is an immutable value. update_ledger() folds new events into a
new ledger; nothing is ever removed or rewritten. A later entry with the
same key supersedes an earlier one for lookups, but both stay recorded.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from toolstream.core.protocols import DatasetLabeler
from toolstream.events.types import (
    NormalizedEvent,
    PromptFetchEvent,
    ResourceFetchEvent,
    ToolCallEvent,
    ToolState,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetLabel:
    """Human-readable description of the data a tool call loaded."""

    dataset: str | None = None
    information: tuple[str, ...] = ()


@dataclass(frozen=True)
class ToolCallSummary:
    tool_name: str
    args: dict[str, Any]
    result: Any
    message_id: str
    turn_index: int
    timestamp: float | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.tool_name, canonical_args(self.args))


@dataclass(frozen=True)
class ResourceFetchSummary:
    backend: str
    uri: str
    name: str
    message_id: str
    turn_index: int
    timestamp: float | None = None


@dataclass(frozen=True)
class PromptFetchSummary:
    backend: str
    prompt_name: str
    args: dict[str, Any]
    message_id: str
    turn_index: int
    timestamp: float | None = None


@dataclass(frozen=True)
class DataContextLedger:
    """Append-only record of prior tool calls, resource and prompt fetches."""

    tool_calls: tuple[ToolCallSummary, ...] = ()
    resource_fetches: tuple[ResourceFetchSummary, ...] = ()
    prompt_fetches: tuple[PromptFetchSummary, ...] = ()
    # Insertion-ordered, no duplicates
    loaded_datasets: tuple[str, ...] = ()
    available_information: tuple[str, ...] = ()
    last_updated: float | None = None
    _keys: frozenset[tuple[str, str]] = field(
        default=frozenset(), repr=False, compare=False
    )

    @property
    def is_empty(self) -> bool:
        return not (self.tool_calls or self.resource_fetches or self.prompt_fetches)


def canonical_args(args: dict[str, Any] | None) -> str:
    """
    Serialize arguments independently of key order.

    Example:
        >>> canonical_args({"b": 1, "a": {"y": 2, "x": 1}})
        '{"a": {"x": 1, "y": 2}, "b": 1}'
    """
    return json.dumps(args or {}, sort_keys=True, default=str)


def update_ledger(
    ledger: DataContextLedger,
    events: Iterable[NormalizedEvent],
    *,
    message_id: str,
    turn_index: int,
    labeler: DatasetLabeler | None = None,
    timestamp: float | None = None,
) -> DataContextLedger:
    """
    Fold one message's normalized events into the ledger.

    Tool-call events sharing a tool_call_id (a call part and its result
    part) are paired into one summary. Failed calls are not recorded so
    they stay retryable. Only complete resource and prompt fetches count.

    Args:
        ledger: Ledger so far
        events: Normalized events of a single message
        message_id: Id of the owning message
        turn_index: Index of the owning message in the conversation
        labeler: Optional backend-supplied dataset labeler
        timestamp: Recording time; defaults to now

    Returns:
        A new ledger; `ledger` is left untouched.
    """
    timestamp = time.time() if timestamp is None else timestamp
    tool_calls = list(ledger.tool_calls)
    resources = list(ledger.resource_fetches)
    prompts = list(ledger.prompt_fetches)
    datasets = dict.fromkeys(ledger.loaded_datasets)
    information = dict.fromkeys(ledger.available_information)
    keys = set(ledger._keys)

    events = list(events)
    for call in _paired_tool_calls(events):
        if call.state is ToolState.ERROR or call.has_error:
            logger.debug(f"Not recording failed call {call.tool_name}")
            continue

        summary = ToolCallSummary(
            tool_name=call.tool_name,
            args=dict(call.args),
            result=call.result,
            message_id=message_id,
            turn_index=turn_index,
            timestamp=timestamp,
        )
        tool_calls.append(summary)
        keys.add(summary.key)

        if labeler is not None:
            label = labeler.label(call.tool_name, summary.args, call.result)
            if label is not None:
                if label.dataset:
                    datasets[label.dataset] = None
                information.update(dict.fromkeys(label.information))

    for event in events:
        if isinstance(event, ResourceFetchEvent) and event.status == "complete":
            resources.append(
                ResourceFetchSummary(
                    backend=event.backend,
                    uri=event.uri,
                    name=event.name or event.uri,
                    message_id=message_id,
                    turn_index=turn_index,
                    timestamp=timestamp,
                )
            )
            information[f"Resource: {event.name or event.uri} from {event.backend}"] = None
        elif isinstance(event, PromptFetchEvent) and event.status == "complete":
            prompts.append(
                PromptFetchSummary(
                    backend=event.backend,
                    prompt_name=event.prompt_name,
                    args=dict(event.args),
                    message_id=message_id,
                    turn_index=turn_index,
                    timestamp=timestamp,
                )
            )
            information[f"Prompt: {event.prompt_name} from {event.backend}"] = None

    added = len(tool_calls) - len(ledger.tool_calls)
    added += len(resources) - len(ledger.resource_fetches)
    added += len(prompts) - len(ledger.prompt_fetches)
    if not added:
        return ledger

    logger.debug(f"Ledger: recorded {added} entries from message {message_id}")
    return DataContextLedger(
        tool_calls=tuple(tool_calls),
        resource_fetches=tuple(resources),
        prompt_fetches=tuple(prompts),
        loaded_datasets=tuple(datasets),
        available_information=tuple(information),
        last_updated=timestamp,
        _keys=frozenset(keys),
    )


def is_redundant(
    tool_name: str, args: dict[str, Any] | None, ledger: DataContextLedger
) -> bool:
    """True iff the same tool was already called with structurally equal args."""
    return (tool_name, canonical_args(args)) in ledger._keys


def get_cached_result(
    tool_name: str, args: dict[str, Any] | None, ledger: DataContextLedger
) -> Any:
    """Result of the most recent identical call, or None."""
    key = (tool_name, canonical_args(args))
    if key not in ledger._keys:
        return None
    for call in reversed(ledger.tool_calls):
        if call.key == key:
            return call.result
    return None


def _paired_tool_calls(events: list[NormalizedEvent]) -> list[ToolCallEvent]:
    """
    Collapse call/result parts that share a tool_call_id.

    The merged call keeps the first position, the first non-empty args and
    the furthest-along state and result. Calls without an id stand alone.
    """
    merged: dict[str, ToolCallEvent] = {}
    order: list[str | ToolCallEvent] = []

    for event in events:
        if not isinstance(event, ToolCallEvent):
            continue
        call_id = event.tool_call_id
        if call_id is None:
            order.append(event)
            continue
        existing = merged.get(call_id)
        if existing is None:
            merged[call_id] = event
            order.append(call_id)
            continue
        merged[call_id] = replace(
            existing,
            args=existing.args or event.args,
            result=event.result if event.result is not None else existing.result,
            state=event.state if _rank(event.state) >= _rank(existing.state) else existing.state,
            error_text=event.error_text or existing.error_text,
        )

    return [merged[item] if isinstance(item, str) else item for item in order]


def _rank(state: ToolState) -> int:
    return {
        ToolState.INPUT_AVAILABLE: 0,
        ToolState.EXECUTING: 1,
        ToolState.COMPLETED: 2,
        ToolState.ERROR: 2,
    }[state]
