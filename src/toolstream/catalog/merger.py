"""
Tool catalog merger - per-backend tool lists → one namespaced catalog.

For each backend, for each tool:
    1. drop it if its original name matches the denylist
    2. namespace it as "<backend>__<tool>" (malformed records and names
       that do not split into exactly two segments are skipped;
       duplicates within one backend abort that backend only)
    3. sanitize its input schema, stripping out-of-band credential params
    4. bind a dispatch closure that re-adds those params from the
       credential provider and formats the backend result
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolstream.backends.fanout import gather_per_backend
from toolstream.core.errors import (
    DispatchFailure,
    SchemaSanitationConflict,
    ToolstreamError,
)
from toolstream.core.protocols import BackendSession, CredentialProvider
from toolstream.core.records import as_mapping, get_field
from toolstream.events.normalizer import parse_tool_name
from toolstream.events.types import TOOL_NAME_SEPARATOR

from .catalog import CatalogEntry, MergedToolCatalog, ToolHandler
from .filters import DEFAULT_DENIED_PATTERNS, ToolDenylist
from .formatting import format_call_result, is_error_result
from .schema import sanitize_schema

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class ToolDefinition(BaseModel):
    """A raw tool as listed by a backend (MCP Tool shape)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @classmethod
    def from_raw(cls, raw: Any) -> "ToolDefinition":
        """Build from a dict (either key style) or an MCP SDK Tool model."""
        if isinstance(raw, ToolDefinition):
            return raw
        record = as_mapping(raw)
        if record is None:
            raise ValueError(f"Unsupported tool definition: {type(raw).__name__}")
        if not record.get("name"):
            raise ValueError("Tool definition has no name")
        return cls(
            name=record["name"],
            description=record.get("description"),
            input_schema=get_field(record, "inputSchema", "input_schema", default={}),
        )


@dataclass(frozen=True)
class CatalogOptions:
    """How backend tool lists are merged."""

    denied_patterns: tuple[str, ...] = DEFAULT_DENIED_PATTERNS
    # backend name → parameter that carries its credential out of band
    credential_params: Mapping[str, str] = field(
        default_factory=lambda: {"sleepyrat": "token"}
    )
    enable_synthetic_tools: bool = True
    max_resource_size: int = 50_000


class StaticCredentialProvider:
    """CredentialProvider over a fixed backend → credential mapping."""

    def __init__(self, credentials: Mapping[str, str] | None = None):
        self._credentials = dict(credentials or {})

    def get_credential(self, backend: str) -> str | None:
        return self._credentials.get(backend)


def namespaced_name(backend: str, tool: str) -> str:
    return f"{backend}{TOOL_NAME_SEPARATOR}{tool}"


def merge_tool_lists(
    tool_lists: Mapping[str, Sequence[Any]],
    sessions: Mapping[str, BackendSession],
    *,
    options: CatalogOptions | None = None,
    credentials: CredentialProvider | None = None,
    generation: int = 0,
    failures: Mapping[str, ToolstreamError] | None = None,
) -> MergedToolCatalog:
    """
    Merge already-listed tools from several backends.

    Args:
        tool_lists: Backend name → raw tool definitions
        sessions: Backend name → session used by the dispatch closures
        options: Denylist, credential params, synthetic tool settings
        credentials: Source of out-of-band credentials for stripped params
        generation: Generation number stamped on the catalog
        failures: Failures already recorded (e.g. from listing)

    Returns:
        MergedToolCatalog. Backends that fail to merge are excluded and
        recorded in `catalog.failures`.
    """
    options = options or CatalogOptions()
    denylist = ToolDenylist(options.denied_patterns)
    all_failures: dict[str, ToolstreamError] = dict(failures or {})
    entries: dict[str, CatalogEntry] = {}

    for backend, raw_tools in tool_lists.items():
        session = sessions.get(backend)
        if session is None:
            logger.warning(f"No session for backend '{backend}', skipping its tools")
            continue
        try:
            backend_entries = _merge_backend(
                backend, raw_tools, session, denylist, options, credentials, generation
            )
        except SchemaSanitationConflict as e:
            logger.error(f"Aborting catalog build for backend '{backend}': {e}")
            all_failures[backend] = e
            continue
        entries.update(backend_entries)

    logger.info(f"Total tools converted: {len(entries)}")
    return MergedToolCatalog(entries, generation=generation, failures=all_failures)


async def build_catalog(
    sessions: Mapping[str, BackendSession],
    *,
    options: CatalogOptions | None = None,
    credentials: CredentialProvider | None = None,
    generation: int = 0,
) -> MergedToolCatalog:
    """
    List tools from every backend concurrently, then merge them.

    Backends whose listing fails are skipped; the rest still merge.
    Synthetic resource/prompt tools are added when enabled.
    """
    from .synthetic import create_synthetic_entries

    options = options or CatalogOptions()
    tool_lists, failures = await gather_per_backend(
        sessions, "list_tools", lambda s: s.list_tools()
    )
    for backend, tools in tool_lists.items():
        logger.info(f"Found {len(tools)} tools from backend: {backend}")

    catalog = merge_tool_lists(
        tool_lists,
        sessions,
        options=options,
        credentials=credentials,
        generation=generation,
        failures=failures,
    )
    if not options.enable_synthetic_tools:
        return catalog

    entries = dict(catalog.items())
    for name, entry in create_synthetic_entries(sessions, options).items():
        if name in entries:
            logger.warning(f"Backend tool {name} shadows a synthetic tool, keeping backend tool")
            continue
        entries[name] = entry
    return MergedToolCatalog(entries, generation=generation, failures=catalog.failures)


def _merge_backend(
    backend: str,
    raw_tools: Sequence[Any],
    session: BackendSession,
    denylist: ToolDenylist,
    options: CatalogOptions,
    credentials: CredentialProvider | None,
    generation: int,
) -> dict[str, CatalogEntry]:
    entries: dict[str, CatalogEntry] = {}
    filtered = 0
    credential_param = options.credential_params.get(backend)

    for raw in raw_tools or []:
        try:
            tool = ToolDefinition.from_raw(raw)
        except ValueError as e:
            logger.warning(f"Skipping malformed tool from {backend}: {e}")
            continue

        if denylist.is_denied(tool.name):
            filtered += 1
            logger.warning(f"Filtered forbidden tool: {namespaced_name(backend, tool.name)}")
            continue

        name = namespaced_name(backend, tool.name)
        if parse_tool_name(name) is None:
            logger.warning(f"Skipping tool with invalid namespaced name: {name!r}")
            continue
        if name in entries:
            raise SchemaSanitationConflict(backend, name)

        schema, stripped = sanitize_schema(
            tool.input_schema, (credential_param,) if credential_param else ()
        )
        if stripped:
            logger.info(f"Removing {', '.join(stripped)} parameter from {name} schema")

        entries[name] = CatalogEntry(
            namespaced_name=name,
            backend_name=backend,
            original_name=tool.name,
            description=tool.description or f"Tool {tool.name} from {backend}",
            input_schema=schema,
            handler=_backend_handler(backend, tool.name, session, stripped, credentials),
            stripped_params=stripped,
            generation=generation,
        )

    if filtered:
        logger.warning(f"Filtered {filtered} forbidden tools from {backend}")
    return entries


def _backend_handler(
    backend: str,
    tool: str,
    session: BackendSession,
    stripped: tuple[str, ...],
    credentials: CredentialProvider | None,
) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> str:
        call_args = dict(args)
        if stripped:
            credential = _credential_for(backend, credentials)
            if credential is None:
                raise DispatchFailure(
                    tool, backend, f"No credential available for backend '{backend}'"
                )
            for param in stripped:
                call_args[param] = credential

        logger.debug(f"Executing {backend}__{tool} with args: {sorted(call_args)}")
        result = await session.call_tool(tool, call_args)

        formatted = format_call_result(result)
        if is_error_result(result):
            raise DispatchFailure(tool, backend, formatted or "Tool reported an error")
        return formatted

    return handler


def _credential_for(backend: str, credentials: CredentialProvider | None) -> str | None:
    if credentials is None:
        return None
    credential = credentials.get_credential(backend)
    if not credential:
        return None
    if credential.startswith(BEARER_PREFIX):
        credential = credential[len(BEARER_PREFIX) :]
    return credential
