"""Data factories for unit tests.

Build backend records in the shapes MCP servers publish them, so tests
do not depend on a real server.
"""

from typing import Any


def make_tool(
    name: str,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """Build an MCP-shaped tool definition."""
    schema: dict[str, Any] = {"type": "object", "properties": properties or {}}
    if required:
        schema["required"] = required
    tool: dict[str, Any] = {"name": name, "inputSchema": schema}
    if description:
        tool["description"] = description
    return tool


def make_message(
    message_id: str, parts: list[dict[str, Any]], role: str = "assistant"
) -> dict[str, Any]:
    """Build a conversation message with parts."""
    return {"id": message_id, "role": role, "parts": parts}


def resource_fetch_part(backend: str, uri: str, status: str = "complete") -> dict[str, Any]:
    """Build a resource-fetch part for a named resource."""
    part: dict[str, Any] = {
        "type": "resource-fetch",
        "serverName": backend,
        "uri": uri,
        "status": status,
    }
    if status == "complete":
        part["resource"] = {"name": uri.rsplit("/", 1)[-1], "content": "..."}
    return part
