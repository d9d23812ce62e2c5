"""Config-driven dataset labeling."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from toolstream.core.records import as_mapping
from toolstream.events.types import TOOL_NAME_SEPARATOR

from .ledger import DatasetLabel


class DatasetRule(BaseModel):
    """Label calls whose tool name contains any of `keywords`."""

    keywords: list[str] = Field(..., min_length=1, description="Case-insensitive substrings of the tool name")
    dataset: str | None = Field(None, description="Dataset label for matching calls")
    information: list[str] = Field(
        default_factory=list, description="Information notes for matching calls"
    )
    backend: str | None = Field(None, description="Only match tools of this backend")


class KeywordDatasetLabeler:
    """
    DatasetLabeler driven by an ordered list of DatasetRule.

    The first matching rule wins. When the call result reports a row count
    (`rowCount` or `row_count`), it is appended to the dataset label.

    Example:
        labeler = KeywordDatasetLabeler([
            DatasetRule(keywords=["compound"], dataset="Compound list"),
        ])
        label = labeler.label("eda__load_compounds", {}, {"rowCount": 120})
        # DatasetLabel(dataset="Compound list (120 rows)", information=())
    """

    def __init__(self, rules: Sequence[DatasetRule]):
        self.rules = list(rules)

    def label(self, tool_name: str, args: dict[str, Any], result: Any) -> DatasetLabel | None:
        backend, _, tool = tool_name.partition(TOOL_NAME_SEPARATOR)
        tool = (tool or backend).lower()

        for rule in self.rules:
            if rule.backend is not None and rule.backend != backend:
                continue
            if not any(k.lower() in tool for k in rule.keywords):
                continue

            dataset = rule.dataset
            rows = _row_count(result)
            if dataset and rows is not None:
                dataset = f"{dataset} ({rows} rows)"
            return DatasetLabel(dataset=dataset, information=tuple(rule.information))

        return None


def _row_count(result: Any) -> int | None:
    record = as_mapping(result)
    if record is None:
        return None
    rows = record.get("rowCount", record.get("row_count"))
    return rows if isinstance(rows, int) else None
