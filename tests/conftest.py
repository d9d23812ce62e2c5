"""
Pytest fixtures for toolstream tests.

Provides fake backends and raw message parts in each transport's shape,
so every test runs without a real backend server.

Key fixture pattern:
- eda_backend / sleepyrat_backend: FakeBackendSession instances that
  record every call; assert on .tool_calls, .resource_reads, etc.
- *_parts: raw parts exactly as each transport emits them
"""

import pytest

from tests.fixtures import make_tool
from toolstream.testing import FakeBackendSession


@pytest.fixture
def eda_backend() -> FakeBackendSession:
    """Data-analysis backend with a forbidden code-execution tool."""
    return FakeBackendSession(
        tools=[
            make_tool(
                "load_dataset",
                {"path": {"type": "string"}, "options": {"type": "object"}},
                required=["path"],
                description="Load a dataset",
            ),
            make_tool("describe", {"columns": {"type": "array", "items": {}}}),
            make_tool("run_python", {"code": {"type": "string"}}),
            make_tool("plot_histogram", {"column": {"type": "string"}}),
        ],
        resources=[
            {"uri": "file:///data/compounds.csv", "name": "compounds.csv", "mimeType": "text/csv"},
            {"uri": "file:///data/notes.md", "mimeType": "text/markdown"},
        ],
        prompts=[
            {
                "name": "summarize_dataset",
                "description": "Summarize a dataset",
                "arguments": [
                    {"name": "dataset", "required": True},
                    {"name": "focus", "required": False},
                ],
            }
        ],
        resource_contents={
            "file:///data/compounds.csv": "name,formula\nwater,H2O\n",
            "file:///data/notes.md": "# Notes",
        },
    )


@pytest.fixture
def sleepyrat_backend() -> FakeBackendSession:
    """Remote backend whose tools take a bearer token parameter."""
    return FakeBackendSession(
        tools=[
            make_tool(
                "search",
                {"token": {"type": "string"}, "query": {"type": "string"}},
                required=["token", "query"],
            ),
            make_tool("ping", {"token": {"type": "string"}}, required=["token"]),
        ]
    )


@pytest.fixture
def local_parts() -> list[dict]:
    """A turn as the local-process transport emits it (args/result)."""
    return [
        {"type": "step-start"},
        {"type": "text", "text": "Let me load the data first."},
        {
            "type": "tool-uv-mcp__load_csv",
            "toolCallId": "call-1",
            "state": "output-available",
            "args": {"path": "a.csv"},
            "result": {"rowCount": 3},
        },
        {"type": "step-finish"},
        {"type": "text", "text": "The dataset has three rows. " * 5},
    ]


@pytest.fixture
def remote_parts() -> list[dict]:
    """A turn as the streaming-HTTP transport emits it (input/output)."""
    return [
        {"type": "reasoning", "text": "Need the compound list."},
        {
            "type": "tool-railway-eda__get_compounds",
            "toolCallId": "call-2",
            "state": "output-available",
            "input": {"limit": 10},
            "output": {"content": [{"type": "text", "text": "10 compounds"}]},
        },
    ]


@pytest.fixture
def direct_parts() -> list[dict]:
    """A turn as the in-process transport emits it (explicit toolName)."""
    return [
        {
            "type": "tool-call",
            "toolCallId": "call-3",
            "toolName": "eda__describe",
            "args": {"columns": ["a", "b"]},
        },
        {
            "type": "tool-result",
            "toolCallId": "call-3",
            "toolName": "eda__describe",
            "result": "mean a=1.0",
        },
    ]
