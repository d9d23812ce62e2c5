"""Build a data-context ledger from a whole conversation history."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from toolstream.core.protocols import DatasetLabeler
from toolstream.core.records import get_field
from toolstream.events.normalizer import (
    DEFAULT_CONVENTIONS,
    TransportConventions,
    normalize_parts,
)

from .ledger import DataContextLedger, update_ledger

logger = logging.getLogger(__name__)


def build_data_context(
    messages: Iterable[Any],
    *,
    labeler: DatasetLabeler | None = None,
    conventions: TransportConventions = DEFAULT_CONVENTIONS,
    timestamp: float | None = None,
) -> DataContextLedger:
    """
    Fold every assistant message of a conversation into a fresh ledger.

    Args:
        messages: Messages with `id`, `role` and `parts` (dicts or models)
        labeler: Optional backend-supplied dataset labeler
        conventions: Transport naming conventions for the normalizer
        timestamp: Recording time for all entries; defaults to now

    Returns:
        DataContextLedger, empty if no assistant message fetched anything
    """
    ledger = DataContextLedger()

    for idx, message in enumerate(messages):
        if get_field(message, "role") != "assistant":
            continue
        parts = get_field(message, "parts") or []
        if not parts:
            continue

        events = normalize_parts(parts, conventions)
        ledger = update_ledger(
            ledger,
            events,
            message_id=str(get_field(message, "id", default=f"message-{idx}")),
            turn_index=idx,
            labeler=labeler,
            timestamp=timestamp,
        )

    logger.debug(
        f"Data context: {len(ledger.tool_calls)} tool calls, "
        f"{len(ledger.resource_fetches)} resources, {len(ledger.prompt_fetches)} prompts"
    )
    return ledger
