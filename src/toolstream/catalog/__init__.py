"""
Tool catalog merging: many backends, one namespaced dispatch table.

Example:
    from toolstream.catalog import CatalogManager

    manager = CatalogManager()
    await manager.rebuild(sessions)
    tools = manager.catalog.to_anthropic_tools()
    result = await manager.dispatch("eda-mcp__load_dataset", {"path": "a.csv"})
"""

from .catalog import CatalogEntry, MergedToolCatalog, ToolHandler
from .filters import DEFAULT_DENIED_PATTERNS, ToolDenylist
from .formatting import (
    dispatch_error_payload,
    format_call_result,
    format_content_item,
    is_error_result,
)
from .manager import CatalogManager, ToolEventCallback
from .merger import (
    CatalogOptions,
    StaticCredentialProvider,
    ToolDefinition,
    build_catalog,
    merge_tool_lists,
    namespaced_name,
)
from .schema import sanitize_schema
from .synthetic import (
    SYNTHETIC_BACKEND,
    SYNTHETIC_TOOL_MODELS,
    GetPromptInput,
    ListPromptsInput,
    ListResourcesInput,
    ReadResourceInput,
    create_synthetic_entries,
)

__all__ = [
    "CatalogEntry",
    "MergedToolCatalog",
    "ToolHandler",
    "CatalogManager",
    "ToolEventCallback",
    "CatalogOptions",
    "StaticCredentialProvider",
    "ToolDefinition",
    "build_catalog",
    "merge_tool_lists",
    "namespaced_name",
    "sanitize_schema",
    "ToolDenylist",
    "DEFAULT_DENIED_PATTERNS",
    "format_call_result",
    "format_content_item",
    "is_error_result",
    "dispatch_error_payload",
    "SYNTHETIC_BACKEND",
    "SYNTHETIC_TOOL_MODELS",
    "ListResourcesInput",
    "ReadResourceInput",
    "ListPromptsInput",
    "GetPromptInput",
    "create_synthetic_entries",
]
