"""
Backend resources: listing, reading and surfacing fetches in the conversation.

A resource read produces "resource-fetch" message parts (fetching, then
complete or error) so the fetch is visible in the turn, normalizes into a
ResourceFetchEvent, and ends up in the data-context ledger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from toolstream.core.errors import BackendListFailure
from toolstream.core.protocols import BackendSession
from toolstream.core.records import as_mapping, get_field
from toolstream.events.types import ResourceFetchEvent

from .fanout import gather_per_backend

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESOURCE_SIZE = 50_000
TRUNCATION_MARKER = "\n\n[Content truncated due to size limit]"


@dataclass(frozen=True)
class ResourceInfo:
    """A resource advertised by a backend."""

    backend: str
    uri: str
    name: str
    title: str | None = None
    description: str | None = None
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.backend,
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass
class ResourceListResult:
    """Resources from every backend that answered."""

    resources: list[ResourceInfo] = field(default_factory=list)
    failures: dict[str, BackendListFailure] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return len(self.resources)


@dataclass(frozen=True)
class ResourceContent:
    """Text of a read resource, truncated to the size limit."""

    content: str
    mime_type: str | None = None


def resource_name(uri: str) -> str:
    """Last path segment of a URI, or the URI itself."""
    return uri.rstrip("/").rsplit("/", 1)[-1] or uri


async def list_all_resources(
    sessions: Mapping[str, BackendSession],
    resource_filter: Callable[[ResourceInfo], bool] | None = None,
) -> ResourceListResult:
    """
    List resources from all backends concurrently.

    Args:
        sessions: Backend name → session
        resource_filter: Optional predicate; resources it rejects are omitted

    Returns:
        ResourceListResult; failing backends are listed in `failures`
    """
    listed, failures = await gather_per_backend(
        sessions, "list_resources", lambda s: s.list_resources()
    )

    result = ResourceListResult(failures=failures)
    for backend, raw_resources in listed.items():
        count = 0
        for raw in raw_resources or []:
            uri = str(get_field(raw, "uri", default=""))
            info = ResourceInfo(
                backend=backend,
                uri=uri,
                name=get_field(raw, "name", default=None) or resource_name(uri),
                title=get_field(raw, "title"),
                description=get_field(raw, "description"),
                mime_type=get_field(raw, "mimeType", "mime_type"),
            )
            if resource_filter and not resource_filter(info):
                continue
            result.resources.append(info)
            count += 1
        logger.debug(f"Found {count} resources from {backend}")

    return result


async def read_resource(
    session: BackendSession,
    uri: str,
    max_size: int = DEFAULT_MAX_RESOURCE_SIZE,
) -> ResourceContent:
    """
    Read a resource and flatten its contents to text.

    Binary blobs are replaced by a placeholder; the combined text is cut
    at `max_size` characters with a truncation marker.
    """
    logger.debug(f"Reading resource: {uri}")
    raw = await session.read_resource(uri)
    contents = get_field(raw, "contents", default=[]) or []

    content = ""
    for item in contents:
        record = as_mapping(item) or {}
        if record.get("text") is not None:
            content += str(record["text"])
        elif record.get("blob") is not None:
            content += f"[Binary content: {len(str(record['blob']))} chars base64]"

        if len(content) >= max_size:
            content = content[:max_size] + TRUNCATION_MARKER
            break

    mime_type = None
    if contents:
        mime_type = (as_mapping(contents[0]) or {}).get("mimeType")

    return ResourceContent(content=content, mime_type=mime_type)


def create_resource_fetch_part(
    backend: str,
    uri: str,
    status: str,
    *,
    name: str | None = None,
    title: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
    content: str | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """
    Build a "resource-fetch" message part.

    The resource body is only attached to complete parts and the error
    only to error parts.
    """
    part: dict[str, Any] = {
        "type": "resource-fetch",
        "serverName": backend,
        "uri": uri,
        "status": status,
    }

    if status == "complete" and content is not None:
        part["resource"] = {
            "name": name or resource_name(uri),
            "title": title,
            "description": description,
            "mimeType": mime_type,
            "content": content,
        }

    if status == "error" and error:
        part["error"] = error

    return part


async def fetch_resources_with_visibility(
    sessions: Mapping[str, BackendSession],
    requests: Sequence[tuple[str, str]],
    max_size: int = DEFAULT_MAX_RESOURCE_SIZE,
) -> list[dict[str, Any]]:
    """
    Read resources one by one, emitting message parts for each step.

    Args:
        sessions: Backend name → session
        requests: (backend, uri) pairs to read
        max_size: Per-resource content limit

    Returns:
        Parts in order: "fetching" then "complete"/"error" per request.
        Requests for unknown backends are skipped.
    """
    parts: list[dict[str, Any]] = []

    for backend, uri in requests:
        session = sessions.get(backend)
        if session is None:
            logger.warning(f"Backend {backend} not found, skipping resource {uri}")
            continue

        parts.append(create_resource_fetch_part(backend, uri, "fetching"))
        try:
            read = await read_resource(session, uri, max_size)
        except Exception as e:
            logger.error(f"Failed to fetch resource {uri}: {e}")
            parts.append(create_resource_fetch_part(backend, uri, "error", error=str(e)))
            continue

        parts.append(
            create_resource_fetch_part(
                backend,
                uri,
                "complete",
                mime_type=read.mime_type,
                content=read.content,
            )
        )
        logger.info(f"Fetched resource: {uri} ({len(read.content)} chars)")

    return parts


def format_resources_for_prompt(resources: Sequence[ResourceFetchEvent]) -> str:
    """
    Render completed resource fetches as a system-prompt section.

    Returns "" when there is nothing complete to show.
    """
    complete = [r for r in resources if r.status == "complete"]
    if not complete:
        return ""

    sections = []
    for resource in complete:
        lines = [f"### Resource: {resource.name} ({resource.backend})", f"URI: {resource.uri}"]
        if resource.mime_type:
            lines.append(f"Type: {resource.mime_type}")
        lines.extend(["Content:", "```", resource.content or "", "```"])
        sections.append("\n".join(lines))

    return "## Available Resources\n\n" + "\n\n---\n\n".join(sections)
