"""
Turn phase classifier. Pure functions, no state between calls.

The rendering layer calls classify() again on every streamed update with
the full event list of the turn. Nothing is memoized: recomputing from the
whole list is what keeps earlier classifications stable as the list grows.

Classification rules, in order:
    1. Fragments containing the answer delimiter are split: reasoning before,
       final-answer candidate after.
    2. Other text after the last tool call (or in a turn without tools) is a
       final-answer candidate; text before it is reasoning.
    3. Only the last candidate survives; earlier ones become reasoning.
    4. A surviving candidate of min_final_length characters or fewer is
       still reasoning (short trailing text is continued analysis).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from toolstream.events.normalizer import last_tool_index
from toolstream.events.types import (
    NormalizedEvent,
    TextFragmentEvent,
    TextRole,
    ToolCallEvent,
)

from .text import PlanPreview, extract_plans, strip_render_blocks

logger = logging.getLogger(__name__)

DEFAULT_MIN_FINAL_LENGTH = 100
DEFAULT_ANSWER_DELIMITER = "---ANSWER---"


class ConversationPhase(str, Enum):
    """What the in-flight turn is doing right now."""

    IDLE = "idle"
    THINKING = "thinking"
    GENERATING = "generating"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ClassifierOptions:
    """Tunables for classify()."""

    min_final_length: int = DEFAULT_MIN_FINAL_LENGTH
    answer_delimiter: str = DEFAULT_ANSWER_DELIMITER
    strip_render_blocks: bool = True


@dataclass(frozen=True)
class ClassifiedFragment:
    """A piece of text with its decided role. A split fragment yields two."""

    position: int
    text: str
    role: TextRole


@dataclass(frozen=True)
class ThinkingStep:
    """One entry of the collapsible "thinking" section, in turn order."""

    kind: Literal["reasoning-text", "tool"]
    position: int
    text: str = ""
    tool: ToolCallEvent | None = None


@dataclass
class TurnClassification:
    """Result of classifying one turn."""

    steps: list[ThinkingStep] = field(default_factory=list)
    fragments: list[ClassifiedFragment] = field(default_factory=list)
    final_text: str = ""
    phase: ConversationPhase = ConversationPhase.IDLE
    plans: list[PlanPreview] = field(default_factory=list)

    @property
    def has_thinking_activity(self) -> bool:
        return bool(self.steps)

    @property
    def reasoning_fragments(self) -> list[ClassifiedFragment]:
        return [f for f in self.fragments if f.role is TextRole.REASONING]


def classify(
    events: Sequence[NormalizedEvent],
    *,
    stream_open: bool,
    options: ClassifierOptions | None = None,
) -> TurnClassification:
    """
    Classify one assistant turn.

    Args:
        events: Normalized events of the turn, in order
        stream_open: Whether the turn is still streaming (external signal)
        options: Threshold and delimiter settings

    Returns:
        TurnClassification with ordered steps, per-fragment roles,
        the accepted final text (or ""), and the turn phase.
    """
    options = options or ClassifierOptions()
    last_tool = last_tool_index(events)

    steps: list[tuple[int, int, ThinkingStep]] = []
    fragments: list[ClassifiedFragment] = []
    plans: list[PlanPreview] = []
    candidate: ClassifiedFragment | None = None

    def add_reasoning(position: int, text: str) -> None:
        fragment = ClassifiedFragment(position, text, TextRole.REASONING)
        fragments.append(fragment)
        steps.append(
            (position, len(steps), ThinkingStep("reasoning-text", position, text))
        )

    def propose(position: int, text: str) -> None:
        nonlocal candidate
        if candidate is not None:
            # Superseded candidates are kept as reasoning, never dropped
            add_reasoning(candidate.position, candidate.text)
        candidate = ClassifiedFragment(position, text, TextRole.FINAL_ANSWER)

    for event in events:
        if isinstance(event, ToolCallEvent):
            steps.append(
                (event.position, len(steps), ThinkingStep("tool", event.position, tool=event))
            )
            continue

        if not isinstance(event, TextFragmentEvent):
            continue

        if event.role is TextRole.REASONING:
            text = event.text.strip()
            if text:
                add_reasoning(event.position, text)
            continue

        raw = event.text
        if options.strip_render_blocks:
            plans.extend(extract_plans(raw, event.position))
            raw = strip_render_blocks(raw)
        text = raw.strip()
        if not text:
            continue

        if event.role is TextRole.FINAL_ANSWER:
            propose(event.position, text)
            continue

        if options.answer_delimiter and options.answer_delimiter in text:
            before, _, after = text.partition(options.answer_delimiter)
            if before.strip():
                add_reasoning(event.position, before.strip())
            if after.strip():
                propose(event.position, after.strip())
            continue

        if last_tool is None or event.position > last_tool:
            propose(event.position, text)
        else:
            add_reasoning(event.position, text)

    final_text = ""
    if candidate is not None:
        if len(candidate.text) > options.min_final_length:
            final_text = candidate.text
            fragments.append(candidate)
        else:
            add_reasoning(candidate.position, candidate.text)

    ordered_steps = [step for _, _, step in sorted(steps, key=lambda s: (s[0], s[1]))]
    fragments.sort(key=lambda f: f.position)

    result = TurnClassification(
        steps=ordered_steps,
        fragments=fragments,
        final_text=final_text,
        phase=_phase(stream_open, bool(ordered_steps), bool(final_text)),
        plans=plans,
    )
    logger.debug(
        f"Classified turn: {len(events)} events, {len(ordered_steps)} steps, "
        f"final={len(final_text)} chars, phase={result.phase.value}"
    )
    return result


def turn_phase(
    events: Sequence[NormalizedEvent],
    *,
    stream_open: bool,
    options: ClassifierOptions | None = None,
) -> ConversationPhase:
    """Shortcut for classify(...).phase."""
    return classify(events, stream_open=stream_open, options=options).phase


def _phase(stream_open: bool, has_activity: bool, has_final: bool) -> ConversationPhase:
    if not stream_open:
        return ConversationPhase.COMPLETE
    if has_final:
        return ConversationPhase.GENERATING
    if has_activity:
        return ConversationPhase.THINKING
    return ConversationPhase.IDLE
