"""
Backend resources and prompts, plus the MCP session adapter.

These helpers fan out to every backend concurrently and tolerate any
subset failing.
"""

from .fanout import gather_per_backend
from .mcp import McpBackendSession
from .prompts import (
    PromptArgument,
    PromptInfo,
    PromptListResult,
    PromptMessage,
    RenderedPrompt,
    create_prompt_fetch_part,
    fetch_prompt_with_visibility,
    format_prompt_messages,
    format_prompts_for_display,
    get_prompt,
    list_all_prompts,
)
from .resources import (
    DEFAULT_MAX_RESOURCE_SIZE,
    ResourceContent,
    ResourceInfo,
    ResourceListResult,
    create_resource_fetch_part,
    fetch_resources_with_visibility,
    format_resources_for_prompt,
    list_all_resources,
    read_resource,
)

__all__ = [
    "gather_per_backend",
    "McpBackendSession",
    "ResourceInfo",
    "ResourceListResult",
    "ResourceContent",
    "DEFAULT_MAX_RESOURCE_SIZE",
    "list_all_resources",
    "read_resource",
    "create_resource_fetch_part",
    "fetch_resources_with_visibility",
    "format_resources_for_prompt",
    "PromptArgument",
    "PromptInfo",
    "PromptListResult",
    "PromptMessage",
    "RenderedPrompt",
    "list_all_prompts",
    "get_prompt",
    "create_prompt_fetch_part",
    "fetch_prompt_with_visibility",
    "format_prompts_for_display",
    "format_prompt_messages",
]
