"""
toolstream - normalize multi-transport tool streams and merge tool catalogs.

Events Layer:
    normalize_parts: Raw message parts from any transport → NormalizedEvent
    ToolCallEvent / TextFragmentEvent / StructuralMarkerEvent: Event variants

Phase Layer:
    classify: Reasoning / tool / final-answer split for the current turn
    ConversationPhase: IDLE, THINKING, GENERATING, COMPLETE

Catalog Layer:
    CatalogManager: Owns the merged catalog and rebuilds it per backend set
    MergedToolCatalog: Namespaced ("backend__tool") dispatch table

Context Layer:
    build_data_context / update_ledger: Cross-turn record of fetched data
    is_redundant / summarize: Redundancy checks and prompt summary

Configuration:
    load_config: Settings from toolstream.yaml

Example:
    from toolstream import CatalogManager, build_data_context, classify, normalize_parts

    manager = CatalogManager()
    await manager.rebuild({"eda-mcp": McpBackendSession(session)})
    tools = manager.catalog.to_anthropic_tools()

    result = classify(normalize_parts(message["parts"]), stream_open=False)
    print(result.final_text)

    context = summarize(build_data_context(messages), budget=2000)
"""

# Events layer
from .events import (
    NormalizedEvent,
    PromptFetchEvent,
    ResourceFetchEvent,
    StructuralMarkerEvent,
    TextFragmentEvent,
    TextRole,
    ToolCallEvent,
    ToolState,
    TransportConventions,
    TransportKind,
    normalize,
    normalize_parts,
    parse_tool_name,
)

# Phase layer
from .phase import (
    ClassifierOptions,
    ConversationPhase,
    TurnClassification,
    classify,
    turn_phase,
)

# Catalog layer
from .catalog import (
    CatalogEntry,
    CatalogManager,
    CatalogOptions,
    MergedToolCatalog,
    StaticCredentialProvider,
    build_catalog,
    merge_tool_lists,
    sanitize_schema,
)

# Context layer
from .context import (
    DataContextLedger,
    DatasetLabel,
    KeywordDatasetLabeler,
    build_data_context,
    get_cached_result,
    is_redundant,
    summarize,
    update_ledger,
)

# Backends
from .backends import McpBackendSession

# Configuration
from .config import ToolstreamConfig, load_config

# Core
from .core import (
    BackendSession,
    CredentialProvider,
    DatasetLabeler,
    DispatchFailure,
    ToolstreamError,
)

__version__ = "0.1.0"

__all__ = [
    # Events
    "normalize",
    "normalize_parts",
    "parse_tool_name",
    "NormalizedEvent",
    "ToolCallEvent",
    "TextFragmentEvent",
    "StructuralMarkerEvent",
    "ResourceFetchEvent",
    "PromptFetchEvent",
    "ToolState",
    "TextRole",
    "TransportKind",
    "TransportConventions",
    # Phase
    "classify",
    "turn_phase",
    "ClassifierOptions",
    "ConversationPhase",
    "TurnClassification",
    # Catalog
    "CatalogEntry",
    "CatalogManager",
    "CatalogOptions",
    "MergedToolCatalog",
    "StaticCredentialProvider",
    "build_catalog",
    "merge_tool_lists",
    "sanitize_schema",
    # Context
    "DataContextLedger",
    "DatasetLabel",
    "KeywordDatasetLabeler",
    "build_data_context",
    "update_ledger",
    "is_redundant",
    "get_cached_result",
    "summarize",
    # Backends
    "McpBackendSession",
    # Configuration
    "ToolstreamConfig",
    "load_config",
    # Core
    "BackendSession",
    "CredentialProvider",
    "DatasetLabeler",
    "DispatchFailure",
    "ToolstreamError",
]
