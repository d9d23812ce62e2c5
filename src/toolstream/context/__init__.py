"""
Session data context: what has already been fetched, and a summary of it.

Example:
    from toolstream.context import build_data_context, is_redundant, summarize

    ledger = build_data_context(messages)
    if is_redundant("eda-mcp__load_dataset", {"path": "a.csv"}, ledger):
        ...
    system_prompt += summarize(ledger, budget=2000)
"""

from .labels import DatasetRule, KeywordDatasetLabeler
from .ledger import (
    DataContextLedger,
    DatasetLabel,
    PromptFetchSummary,
    ResourceFetchSummary,
    ToolCallSummary,
    canonical_args,
    get_cached_result,
    is_redundant,
    update_ledger,
)
from .summary import DEFAULT_ITEMS_PER_CATEGORY, summarize
from .tracker import build_data_context

__all__ = [
    "DataContextLedger",
    "DatasetLabel",
    "ToolCallSummary",
    "ResourceFetchSummary",
    "PromptFetchSummary",
    "canonical_args",
    "update_ledger",
    "is_redundant",
    "get_cached_result",
    "build_data_context",
    "summarize",
    "DEFAULT_ITEMS_PER_CATEGORY",
    "DatasetRule",
    "KeywordDatasetLabeler",
]
