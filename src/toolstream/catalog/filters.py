"""Tool denylist applied before tools are namespaced."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Code execution and chart rendering tools are never offered to the model
DEFAULT_DENIED_PATTERNS: tuple[str, ...] = (
    r"^run_",
    r"_python$",
    r"^plot_",
    r"^create_chart",
    r"^visualize_",
    r"^generate_plot",
)


class ToolDenylist:
    """Case-insensitive regex denylist over original (un-namespaced) tool names."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_DENIED_PATTERNS):
        self.patterns = tuple(patterns)
        self._compiled = [re.compile(p, re.IGNORECASE) for p in self.patterns]

    def is_denied(self, tool_name: str) -> bool:
        return any(pattern.search(tool_name) for pattern in self._compiled)

    def __repr__(self) -> str:
        return f"ToolDenylist({list(self.patterns)!r})"
