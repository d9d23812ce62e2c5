"""
Merged tool catalog - one dispatch table over every backend.

The catalog owns the dispatch closures. Callers address tools only by
namespaced name ("backend__tool") and never see the sessions behind them.
A catalog is read-only once built; rebuilding produces a new catalog and
retires the old one, after which its entries refuse to dispatch.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from toolstream.core.errors import DispatchFailure, ToolstreamError
from toolstream.events.normalizer import parse_tool_name

from .formatting import dispatch_error_payload

if TYPE_CHECKING:
    from anthropic.types import ToolParam

logger = logging.getLogger(__name__)

# Receives the caller's arguments, returns the formatted result string.
# Raises on failure; CatalogEntry.dispatch turns that into an error string.
ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


@dataclass
class CatalogEntry:
    """One dispatchable tool in a merged catalog."""

    namespaced_name: str
    backend_name: str
    original_name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler = field(repr=False, compare=False)
    stripped_params: tuple[str, ...] = ()
    generation: int = 0
    _catalog: MergedToolCatalog | None = field(default=None, repr=False, compare=False)

    @property
    def is_stale(self) -> bool:
        return self._catalog is not None and self._catalog.retired

    async def invoke(self, args: dict[str, Any] | None = None) -> str:
        """
        Run the tool and return its formatted result.

        Raises:
            DispatchFailure: If the entry is stale, the backend raised,
                or the backend returned an error result
        """
        if self.is_stale:
            raise DispatchFailure(
                self.original_name,
                self.backend_name,
                f"catalog generation {self.generation} has been replaced",
            )
        try:
            return await self.handler(dict(args or {}))
        except DispatchFailure:
            raise
        except Exception as e:
            raise DispatchFailure(self.original_name, self.backend_name, str(e)) from e

    async def dispatch(self, args: dict[str, Any] | None = None) -> str:
        """
        Run the tool; never raises.

        Errors are returned as a JSON error string so the conversation can
        see the failure and react to it.
        """
        try:
            return await self.invoke(args)
        except DispatchFailure as e:
            logger.error(f"Error executing {self.namespaced_name}: {e.message}")
            return dispatch_error_payload(e.tool, e.backend, e.message)

    def to_schema(self, format: str) -> dict[str, Any]:
        """Tool definition in "anthropic" or "openai" format."""
        if format == "anthropic":
            return {
                "name": self.namespaced_name,
                "description": self.description,
                "input_schema": {"type": "object", **self.input_schema},
            }
        if format == "openai":
            return {
                "type": "function",
                "function": {
                    "name": self.namespaced_name,
                    "description": self.description,
                    "parameters": {"type": "object", **self.input_schema},
                },
            }
        raise ValueError(f"Invalid format: {format}. Must be 'openai' or 'anthropic'")


class MergedToolCatalog(Mapping[str, CatalogEntry]):
    """
    Read-only mapping of namespaced tool name → CatalogEntry.

    Safe to share by reference across concurrent dispatches.

    Example:
        catalog = await build_catalog(sessions)
        result = await catalog.dispatch("eda-mcp__load_dataset", {"path": "a.csv"})
    """

    def __init__(
        self,
        entries: Mapping[str, CatalogEntry] | None = None,
        generation: int = 0,
        failures: Mapping[str, ToolstreamError] | None = None,
    ):
        self._entries: dict[str, CatalogEntry] = dict(entries or {})
        self.generation = generation
        self.failures: dict[str, ToolstreamError] = dict(failures or {})
        self.retired = False
        for entry in self._entries.values():
            entry._catalog = self
            entry.generation = generation

    def __getitem__(self, name: str) -> CatalogEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"MergedToolCatalog(generation={self.generation}, "
            f"tools={len(self._entries)}, retired={self.retired})"
        )

    @property
    def backends(self) -> list[str]:
        return sorted({e.backend_name for e in self._entries.values()})

    def tools_by_backend(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for name, entry in self._entries.items():
            grouped.setdefault(entry.backend_name, []).append(name)
        return grouped

    def retire(self) -> None:
        """Mark this catalog as replaced; its entries stop dispatching."""
        self.retired = True
        logger.debug(f"Retired tool catalog generation {self.generation}")

    async def invoke(self, name: str, args: dict[str, Any] | None = None) -> str:
        """
        Run a tool by namespaced name.

        Raises:
            DispatchFailure: Unknown tool or failed invocation
        """
        entry = self._entries.get(name)
        if entry is None:
            backend, tool = parse_tool_name(name) or ("", name)
            raise DispatchFailure(tool, backend, f"Unknown tool: {name}")
        return await entry.invoke(args)

    async def dispatch(self, name: str, args: dict[str, Any] | None = None) -> str:
        """Run a tool by namespaced name; never raises."""
        try:
            return await self.invoke(name, args)
        except DispatchFailure as e:
            logger.error(f"Error executing {name}: {e.message}")
            return dispatch_error_payload(e.tool, e.backend, e.message)

    def get_tool_schemas(self, format: str) -> list[dict[str, Any]]:
        """
        Get tool schemas in provider-specific format.

        Raises:
            ValueError: If format is not "openai" or "anthropic"
        """
        if format not in ("openai", "anthropic"):
            raise ValueError(
                f"Invalid format: {format}. Must be 'openai' or 'anthropic'"
            )
        return [entry.to_schema(format) for entry in self._entries.values()]

    def to_anthropic_tools(self) -> list["ToolParam"]:
        return cast(list["ToolParam"], self.get_tool_schemas("anthropic"))

    def to_openai_tools(self) -> list[dict[str, Any]]:
        return self.get_tool_schemas("openai")
