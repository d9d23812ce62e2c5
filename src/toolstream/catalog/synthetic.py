"""
Synthetic catalog tools for backend resources and prompts.

These let the model browse resources and prompt templates across every
backend through the same dispatch path as ordinary tools. They live under
the reserved "mcp" namespace.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from toolstream.backends.prompts import get_prompt, list_all_prompts
from toolstream.backends.resources import list_all_resources, read_resource
from toolstream.core.errors import DispatchFailure
from toolstream.core.protocols import BackendSession

from .catalog import CatalogEntry, ToolHandler
from .merger import CatalogOptions, namespaced_name

logger = logging.getLogger(__name__)

SYNTHETIC_BACKEND = "mcp"


# --- Tool input models (single source of truth for schemas) ---


class ListResourcesInput(BaseModel):
    """List resources (files, datasets, documents) available from connected backends."""

    server_name: str | None = Field(
        None, description="Only list resources from this backend"
    )


class ReadResourceInput(BaseModel):
    """Read the content of a resource from a backend."""

    server_name: str = Field(..., description="Backend that owns the resource")
    uri: str = Field(..., description="URI of the resource to read")


class ListPromptsInput(BaseModel):
    """List prompt templates available from connected backends."""

    server_name: str | None = Field(
        None, description="Only list prompts from this backend"
    )


class GetPromptInput(BaseModel):
    """Render a prompt template from a backend with the given arguments."""

    server_name: str = Field(..., description="Backend that owns the prompt")
    prompt_name: str = Field(..., description="Name of the prompt template")
    args: dict[str, Any] = Field(
        default_factory=dict, description="Arguments for the prompt template"
    )


# Registry mapping synthetic tool names to their input models
SYNTHETIC_TOOL_MODELS: dict[str, type[BaseModel]] = {
    "list_resources": ListResourcesInput,
    "read_resource": ReadResourceInput,
    "list_prompts": ListPromptsInput,
    "get_prompt": GetPromptInput,
}


def create_synthetic_entries(
    sessions: Mapping[str, BackendSession],
    options: CatalogOptions | None = None,
) -> dict[str, CatalogEntry]:
    """Build catalog entries for the resource and prompt tools."""
    options = options or CatalogOptions()
    handlers = {
        "list_resources": _list_resources_handler(sessions),
        "read_resource": _read_resource_handler(sessions, options.max_resource_size),
        "list_prompts": _list_prompts_handler(sessions),
        "get_prompt": _get_prompt_handler(sessions),
    }

    entries: dict[str, CatalogEntry] = {}
    for tool, model in SYNTHETIC_TOOL_MODELS.items():
        schema = model.model_json_schema()
        schema.pop("title", None)
        name = namespaced_name(SYNTHETIC_BACKEND, tool)
        entries[name] = CatalogEntry(
            namespaced_name=name,
            backend_name=SYNTHETIC_BACKEND,
            original_name=tool,
            description=model.__doc__ or "",
            input_schema=schema,
            handler=_validated(tool, model, handlers[tool]),
        )
    return entries


def _validated(tool: str, model: type[BaseModel], handler: ToolHandler) -> ToolHandler:
    async def run(args: dict[str, Any]) -> str:
        try:
            validated = model.model_validate(args)
        except Exception as e:
            raise DispatchFailure(
                tool, SYNTHETIC_BACKEND, f"Error validating {tool} arguments: {e}"
            ) from e
        return await handler(validated.model_dump(exclude_none=True))

    return run


def _session_for(
    sessions: Mapping[str, BackendSession], tool: str, server_name: str
) -> BackendSession:
    session = sessions.get(server_name)
    if session is None:
        raise DispatchFailure(tool, server_name, f"Server '{server_name}' not found")
    return session


def _selected(
    sessions: Mapping[str, BackendSession], tool: str, server_name: str | None
) -> Mapping[str, BackendSession]:
    if server_name is None:
        return sessions
    return {server_name: _session_for(sessions, tool, server_name)}


def _list_resources_handler(sessions: Mapping[str, BackendSession]) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> str:
        selected = _selected(sessions, "list_resources", args.get("server_name"))
        listed = await list_all_resources(selected)
        return json.dumps(
            {
                "resources": [r.to_dict() for r in listed.resources],
                "total": listed.total_count,
                "failed_servers": sorted(listed.failures),
            },
            indent=2,
        )

    return handler


def _read_resource_handler(
    sessions: Mapping[str, BackendSession], max_size: int
) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> str:
        session = _session_for(sessions, "read_resource", args["server_name"])
        read = await read_resource(session, args["uri"], max_size)
        return json.dumps(
            {
                "uri": args["uri"],
                "server": args["server_name"],
                "mimeType": read.mime_type,
                "content": read.content,
            },
            indent=2,
        )

    return handler


def _list_prompts_handler(sessions: Mapping[str, BackendSession]) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> str:
        selected = _selected(sessions, "list_prompts", args.get("server_name"))
        listed = await list_all_prompts(selected)
        return json.dumps(
            {
                "prompts": [p.to_dict() for p in listed.prompts],
                "total": listed.total_count,
                "failed_servers": sorted(listed.failures),
            },
            indent=2,
        )

    return handler


def _get_prompt_handler(sessions: Mapping[str, BackendSession]) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> str:
        session = _session_for(sessions, "get_prompt", args["server_name"])
        rendered = await get_prompt(session, args["prompt_name"], args.get("args"))
        logger.info(f"Rendered prompt {args['prompt_name']} from {args['server_name']}")
        return json.dumps(
            {
                "server": args["server_name"],
                "prompt": args["prompt_name"],
                **rendered.to_dict(),
            },
            indent=2,
        )

    return handler
