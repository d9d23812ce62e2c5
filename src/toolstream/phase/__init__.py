"""
Per-turn phase classification.

Example:
    from toolstream.events import normalize_parts
    from toolstream.phase import classify, ConversationPhase

    result = classify(normalize_parts(message["parts"]), stream_open=True)
    if result.phase is ConversationPhase.THINKING:
        ...
"""

from .classifier import (
    DEFAULT_ANSWER_DELIMITER,
    DEFAULT_MIN_FINAL_LENGTH,
    ClassifiedFragment,
    ClassifierOptions,
    ConversationPhase,
    ThinkingStep,
    TurnClassification,
    classify,
    turn_phase,
)
from .text import PlanPreview, extract_plans, strip_render_blocks

__all__ = [
    "classify",
    "turn_phase",
    "ClassifierOptions",
    "ClassifiedFragment",
    "ConversationPhase",
    "ThinkingStep",
    "TurnClassification",
    "PlanPreview",
    "extract_plans",
    "strip_render_blocks",
    "DEFAULT_MIN_FINAL_LENGTH",
    "DEFAULT_ANSWER_DELIMITER",
]
