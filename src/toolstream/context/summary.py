"""
Compact ledger summary for the next turn's system prompt.

The summary lists only the most recent items of each category and shrinks
further until it fits the caller's character budget.
"""

from __future__ import annotations

import logging

from .ledger import DataContextLedger, canonical_args

logger = logging.getLogger(__name__)

SUMMARY_HEADER = "## Session Data Context\n"
REUSE_INSTRUCTION = "\nREUSE existing data. Only reload if user requests new/different data.\n"
DEFAULT_ITEMS_PER_CATEGORY = 3


def summarize(
    ledger: DataContextLedger,
    budget: int,
    items_per_category: int = DEFAULT_ITEMS_PER_CATEGORY,
) -> str:
    """
    Render the ledger as a prompt section of at most `budget` characters.

    Each category keeps its `items_per_category` most recently recorded
    items. If that does not fit, fewer items per category are tried.

    Returns:
        The summary, or "" for an empty ledger or when even one item per
        category does not fit. Callers should omit the section on "".
    """
    if ledger.is_empty or budget <= 0:
        return ""

    for limit in range(max(items_per_category, 1), 0, -1):
        text = _render(ledger, limit)
        if len(text) <= budget:
            return text

    logger.debug(f"Ledger summary does not fit in {budget} characters")
    return ""


def _render(ledger: DataContextLedger, limit: int) -> str:
    sections = [SUMMARY_HEADER]

    if ledger.loaded_datasets:
        sections.append(f"**Datasets:** {', '.join(ledger.loaded_datasets[-limit:])}")

    if ledger.tool_calls:
        calls = ", ".join(
            f"{c.tool_name}({canonical_args(c.args)})" for c in ledger.tool_calls[-limit:]
        )
        sections.append(f"**Tool calls:** {calls}")

    if ledger.resource_fetches:
        resources = ", ".join(
            f"{r.name} ({r.backend})" for r in ledger.resource_fetches[-limit:]
        )
        sections.append(f"**Resources:** {resources}")

    if ledger.prompt_fetches:
        prompts = ", ".join(
            f"{p.prompt_name} ({p.backend})" for p in ledger.prompt_fetches[-limit:]
        )
        sections.append(f"**Prompts:** {prompts}")

    if ledger.available_information:
        info = ", ".join(ledger.available_information[-limit:])
        sections.append(f"**Available Info:** {info}")

    sections.append(REUSE_INSTRUCTION)
    return "\n".join(sections)
