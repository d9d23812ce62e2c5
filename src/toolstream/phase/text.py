"""Pure helpers that strip render-only blocks out of assistant text."""

from __future__ import annotations

import re
from dataclasses import dataclass

_PLAN_TAG = re.compile(
    r'<plan(?:\s+title="([^"]*)")?(?:\s+description="([^"]*)")?\s*>(.*?)</plan>',
    re.DOTALL,
)
_ANY_PLAN_TAG = re.compile(r"<plan[^>]*>.*?</plan>", re.DOTALL)
_ARTIFACT_TAG = re.compile(r"<artifact[^>]*>.*?</artifact>", re.DOTALL)
_CODE_BLOCK = re.compile(
    r"```(?:jsx|javascript|tsx|js|typescript|ts)\s(.*?)```", re.DOTALL
)


@dataclass(frozen=True)
class PlanPreview:
    """A <plan> block lifted out of assistant text."""

    title: str
    content: str
    description: str | None = None
    position: int = 0


def extract_plans(text: str, position: int = 0) -> list[PlanPreview]:
    """
    Collect <plan title=".." description="..">…</plan> blocks from text.

    Example:
        >>> extract_plans('<plan title="Steps">1. load</plan>')[0].title
        'Steps'
    """
    return [
        PlanPreview(
            title=match.group(1) or "Plan",
            description=match.group(2) or None,
            content=(match.group(3) or "").strip(),
            position=position,
        )
        for match in _PLAN_TAG.finditer(text)
    ]


def strip_render_blocks(text: str) -> str:
    """Remove code, artifact and plan blocks that are rendered elsewhere."""
    text = _CODE_BLOCK.sub("", text)
    text = _ARTIFACT_TAG.sub("", text)
    return _ANY_PLAN_TAG.sub("", text)
