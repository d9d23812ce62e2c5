"""Tests for CatalogManager rebuilds and tool call lifecycle."""

import asyncio
import json

from toolstream.catalog import CatalogManager, CatalogOptions, StaticCredentialProvider
from toolstream.events import ToolCallEvent, ToolState, TransportKind
from toolstream.testing import FakeBackendSession

from tests.fixtures import make_tool

OPTIONS = CatalogOptions(enable_synthetic_tools=False)


class TestRebuild:
    """Generation bumps and atomic replacement."""

    async def test_first_rebuild_is_generation_one(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)

        catalog = await manager.rebuild({"eda": eda_backend})

        assert manager.generation == 1
        assert manager.catalog is catalog
        assert manager.backends == ["eda"]

    async def test_rebuild_retires_previous_catalog(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        old = await manager.rebuild({"eda": eda_backend})
        stale_entry = old["eda__load_dataset"]

        new = await manager.rebuild({"eda": eda_backend})

        assert old.retired is True
        assert new.retired is False
        assert new.generation == 2
        output = json.loads(await stale_entry.dispatch({"path": "a.csv"}))
        assert "replaced" in output["error"]
        assert eda_backend.tool_calls == []

    async def test_backend_set_change(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        await manager.rebuild({"eda": eda_backend})

        other = FakeBackendSession(tools=[make_tool("query")])
        catalog = await manager.rebuild({"db": other})

        assert set(catalog) == {"db__query"}
        assert "eda__load_dataset" not in manager.catalog

    async def test_rebuild_if_changed(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        first = await manager.rebuild_if_changed({"eda": eda_backend})

        same = await manager.rebuild_if_changed({"eda": eda_backend})
        changed = await manager.rebuild_if_changed({"eda": eda_backend, "db": FakeBackendSession()})

        assert same is first
        assert changed is not first
        assert manager.generation == 2

    async def test_concurrent_rebuilds_get_distinct_generations(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)

        catalogs = await asyncio.gather(
            manager.rebuild({"eda": eda_backend}), manager.rebuild({"eda": eda_backend})
        )

        assert sorted(c.generation for c in catalogs) == [1, 2]
        assert manager.generation == 2


class TestExecuteToolCall:
    """Lifecycle events for one tool call."""

    async def test_successful_lifecycle(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        await manager.rebuild({"eda": eda_backend})
        seen: list[ToolCallEvent] = []

        async def on_event(event: ToolCallEvent) -> None:
            seen.append(event)

        final = await manager.execute_tool_call(
            "eda__load_dataset", {"path": "a.csv"}, on_event=on_event, tool_call_id="call-9"
        )

        assert [e.state for e in seen] == [
            ToolState.INPUT_AVAILABLE,
            ToolState.EXECUTING,
            ToolState.COMPLETED,
        ]
        assert final is seen[-1]
        assert final.tool_call_id == "call-9"
        assert final.args == {"path": "a.csv"}
        assert "load_dataset called" in final.result

    async def test_failure_ends_in_error_state(self):
        manager = CatalogManager(options=OPTIONS)
        await manager.rebuild({"eda": FakeBackendSession(tools=[make_tool("load")], fail_on={"call_tool"})})

        final = await manager.execute_tool_call("eda__load", {})

        assert final.state is ToolState.ERROR
        assert final.error_text == "call_tool unavailable"
        assert json.loads(final.result)["backend"] == "eda"
        assert final.has_error is True

    async def test_unknown_tool(self):
        manager = CatalogManager(options=OPTIONS)

        final = await manager.execute_tool_call("eda__missing", {})

        assert final.state is ToolState.ERROR
        assert final.error_text == "Unknown tool: eda__missing"

    async def test_callback_errors_do_not_break_the_call(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        await manager.rebuild({"eda": eda_backend})

        async def broken(event: ToolCallEvent) -> None:
            raise RuntimeError("renderer down")

        final = await manager.execute_tool_call("eda__describe", {}, on_event=broken)

        assert final.state is ToolState.COMPLETED

    async def test_transport_and_credentials(self, sleepyrat_backend):
        manager = CatalogManager(
            options=OPTIONS, credentials=StaticCredentialProvider({"sleepyrat": "tok"})
        )
        await manager.rebuild({"sleepyrat": sleepyrat_backend})

        final = await manager.execute_tool_call("sleepyrat__search", {"query": "q"})

        assert final.source_transport is TransportKind.STREAMING_HTTP
        assert sleepyrat_backend.tool_calls[0]["arguments"] == {"query": "q", "token": "tok"}

    async def test_dispatch_uses_current_catalog(self, eda_backend):
        manager = CatalogManager(options=OPTIONS)
        await manager.rebuild({"eda": eda_backend})

        output = await manager.dispatch("eda__describe", {"columns": ["a"]})

        assert output.startswith("describe called")
