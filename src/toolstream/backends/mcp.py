"""
BackendSession adapter for the MCP Python SDK.

Wraps an already-initialized `mcp.ClientSession`; connecting it over stdio
or streamable HTTP is the caller's job.

Example:
    async with stdio_client(params) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()
            backend = McpBackendSession(session)
            catalog = await build_catalog({"uv-mcp": backend})
"""

from __future__ import annotations

import logging
from typing import Any

from mcp import ClientSession
from pydantic import AnyUrl

logger = logging.getLogger(__name__)


class McpBackendSession:
    """Exposes a `mcp.ClientSession` through the BackendSession protocol."""

    def __init__(self, session: ClientSession):
        self.session = session

    async def list_tools(self) -> list[Any]:
        result = await self.session.list_tools()
        return list(result.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        logger.debug(f"MCP call_tool: {name}")
        return await self.session.call_tool(name, arguments)

    async def list_resources(self) -> list[Any]:
        result = await self.session.list_resources()
        return list(result.resources)

    async def read_resource(self, uri: str) -> Any:
        return await self.session.read_resource(AnyUrl(uri))

    async def list_prompts(self) -> list[Any]:
        result = await self.session.list_prompts()
        return list(result.prompts)

    async def get_prompt(self, name: str, arguments: dict[str, Any]) -> Any:
        # MCP prompt arguments are string-valued
        string_args = {key: str(value) for key, value in arguments.items()}
        return await self.session.get_prompt(name, string_args)
