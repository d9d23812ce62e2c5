"""
CatalogManager - owns the current tool catalog for a set of backends.

Rebuilding swaps the catalog reference in one step and retires the
previous catalog, so a dispatch that raced the rebuild is refused with a
stale error instead of reaching a backend that may have gone away.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from toolstream.core.errors import DispatchFailure
from toolstream.core.protocols import BackendSession, CredentialProvider
from toolstream.events.normalizer import DEFAULT_CONVENTIONS, TransportConventions
from toolstream.events.types import ToolCallEvent, ToolState

from .catalog import MergedToolCatalog
from .formatting import dispatch_error_payload
from .merger import CatalogOptions, build_catalog

logger = logging.getLogger(__name__)

# Called with each lifecycle snapshot of a tool call
ToolEventCallback = Callable[[ToolCallEvent], Awaitable[None]]


class CatalogManager:
    """
    Holds the merged catalog and rebuilds it when the backend set changes.

    Example:
        manager = CatalogManager(options=CatalogOptions())
        await manager.rebuild({"eda-mcp": eda_session})
        event = await manager.execute_tool_call("eda-mcp__load_dataset", {"path": "a.csv"})
        if event.state is ToolState.ERROR:
            ...
    """

    def __init__(
        self,
        *,
        options: CatalogOptions | None = None,
        credentials: CredentialProvider | None = None,
        conventions: TransportConventions = DEFAULT_CONVENTIONS,
    ):
        self._options = options or CatalogOptions()
        self._credentials = credentials
        self._conventions = conventions
        self._catalog = MergedToolCatalog()
        self._sessions: dict[str, BackendSession] = {}
        self._lock = asyncio.Lock()

    @property
    def catalog(self) -> MergedToolCatalog:
        """The current catalog. Never retired."""
        return self._catalog

    @property
    def generation(self) -> int:
        return self._catalog.generation

    @property
    def backends(self) -> list[str]:
        return sorted(self._sessions)

    async def rebuild(self, sessions: Mapping[str, BackendSession]) -> MergedToolCatalog:
        """
        Build a catalog for `sessions` and make it current.

        Concurrent rebuilds are serialized; each gets its own generation.
        """
        async with self._lock:
            generation = self._catalog.generation + 1
            catalog = await build_catalog(
                sessions,
                options=self._options,
                credentials=self._credentials,
                generation=generation,
            )
            previous, self._catalog = self._catalog, catalog
            self._sessions = dict(sessions)
            previous.retire()

        if catalog.failures:
            logger.warning(
                f"Catalog generation {generation} built without: "
                f"{', '.join(sorted(catalog.failures))}"
            )
        logger.info(
            f"Catalog generation {generation}: {len(catalog)} tools "
            f"from {len(catalog.backends)} backends"
        )
        return catalog

    async def rebuild_if_changed(
        self, sessions: Mapping[str, BackendSession]
    ) -> MergedToolCatalog:
        """Rebuild only if the backend names or sessions differ from the current set."""
        if dict(sessions) == self._sessions and self._catalog.generation > 0:
            return self._catalog
        return await self.rebuild(sessions)

    async def dispatch(self, name: str, args: dict[str, Any] | None = None) -> str:
        """Dispatch against the current catalog; never raises."""
        return await self._catalog.dispatch(name, args)

    async def execute_tool_call(
        self,
        name: str,
        args: dict[str, Any] | None = None,
        on_event: ToolEventCallback | None = None,
        tool_call_id: str | None = None,
    ) -> ToolCallEvent:
        """
        Run a tool and report its lifecycle as ToolCallEvents.

        `on_event` receives the input-available, executing and final
        snapshots in that order. Failures end in the error state with the
        JSON error payload as the result and the failure message as
        error_text.

        Returns:
            The final (completed or error) event
        """
        catalog = self._catalog
        event = ToolCallEvent(
            tool_name=name,
            args=dict(args or {}),
            state=ToolState.INPUT_AVAILABLE,
            source_transport=self._conventions.transport_for(name),
            tool_call_id=tool_call_id or f"call-{uuid.uuid4().hex[:12]}",
            original_type="tool-call",
        )
        await _emit(on_event, event)

        event = event.transition(ToolState.EXECUTING)
        await _emit(on_event, event)

        try:
            output = await catalog.invoke(name, event.args)
        except DispatchFailure as e:
            logger.error(f"Error executing {name}: {e.message}")
            payload = dispatch_error_payload(e.tool, e.backend, e.message)
            event = event.transition(ToolState.ERROR, result=payload, error_text=e.message)
        else:
            event = event.transition(ToolState.COMPLETED, result=output)
        await _emit(on_event, event)
        return event


async def _emit(callback: ToolEventCallback | None, event: ToolCallEvent) -> None:
    if callback is None:
        return
    try:
        await callback(event)
    except Exception as e:
        logger.error(f"Tool event callback failed for {event.tool_name}: {e}", exc_info=True)
