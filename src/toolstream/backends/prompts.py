"""Backend prompt templates: listing, rendering and conversation parts."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from toolstream.core.errors import BackendListFailure
from toolstream.core.protocols import BackendSession
from toolstream.core.records import as_mapping, get_field

from .fanout import gather_per_backend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str | None = None
    required: bool = False


@dataclass(frozen=True)
class PromptInfo:
    """A prompt template advertised by a backend."""

    backend: str
    name: str
    title: str | None = None
    description: str | None = None
    arguments: tuple[PromptArgument, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.backend,
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "arguments": [asdict(a) for a in self.arguments],
        }


@dataclass
class PromptListResult:
    prompts: list[PromptInfo] = field(default_factory=list)
    failures: dict[str, BackendListFailure] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return len(self.prompts)


@dataclass(frozen=True)
class PromptMessage:
    role: str
    content: str


@dataclass(frozen=True)
class RenderedPrompt:
    """A prompt template after argument substitution by its backend."""

    messages: tuple[PromptMessage, ...] = ()
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "messages": [asdict(m) for m in self.messages],
        }


async def list_all_prompts(sessions: Mapping[str, BackendSession]) -> PromptListResult:
    """List prompt templates from all backends concurrently."""
    listed, failures = await gather_per_backend(
        sessions, "list_prompts", lambda s: s.list_prompts()
    )

    result = PromptListResult(failures=failures)
    for backend, raw_prompts in listed.items():
        for raw in raw_prompts or []:
            arguments = tuple(
                PromptArgument(
                    name=str(get_field(arg, "name", default="")),
                    description=get_field(arg, "description"),
                    required=bool(get_field(arg, "required", default=False)),
                )
                for arg in get_field(raw, "arguments", default=[]) or []
            )
            result.prompts.append(
                PromptInfo(
                    backend=backend,
                    name=str(get_field(raw, "name", default="")),
                    title=get_field(raw, "title"),
                    description=get_field(raw, "description"),
                    arguments=arguments,
                )
            )
        logger.debug(f"Found {len(raw_prompts or [])} prompts from {backend}")

    return result


async def get_prompt(
    session: BackendSession,
    name: str,
    args: dict[str, Any] | None = None,
) -> RenderedPrompt:
    """
    Render a prompt template on its backend.

    Message content is flattened to text: strings pass through, text
    content items contribute their text, anything else is JSON.
    """
    logger.debug(f"Getting prompt: {name} with args: {args}")
    raw = await session.get_prompt(name, args or {})

    messages = tuple(
        PromptMessage(
            role=str(get_field(msg, "role", default="user")),
            content=_message_text(get_field(msg, "content", default="")),
        )
        for msg in get_field(raw, "messages", default=[]) or []
    )
    return RenderedPrompt(messages=messages, description=get_field(raw, "description"))


def create_prompt_fetch_part(
    backend: str,
    prompt_name: str,
    args: dict[str, Any],
    status: str,
    *,
    prompt: RenderedPrompt | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Build a "prompt-fetch" message part."""
    part: dict[str, Any] = {
        "type": "prompt-fetch",
        "serverName": backend,
        "promptName": prompt_name,
        "args": args,
        "status": status,
    }

    if status == "complete" and prompt is not None:
        part["prompt"] = prompt.to_dict()

    if status == "error" and error:
        part["error"] = error

    return part


async def fetch_prompt_with_visibility(
    session: BackendSession,
    backend: str,
    prompt_name: str,
    args: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Render a prompt, returning "fetching" then "complete"/"error" parts."""
    args = args or {}
    parts = [create_prompt_fetch_part(backend, prompt_name, args, "fetching")]

    try:
        prompt = await get_prompt(session, prompt_name, args)
    except Exception as e:
        logger.error(f"Failed to fetch prompt {prompt_name}: {e}")
        parts.append(
            create_prompt_fetch_part(backend, prompt_name, args, "error", error=str(e))
        )
        return parts

    parts.append(
        create_prompt_fetch_part(backend, prompt_name, args, "complete", prompt=prompt)
    )
    logger.info(f"Fetched prompt: {prompt_name}")
    return parts


def format_prompts_for_display(prompts: Sequence[PromptInfo]) -> str:
    """
    Render available prompt templates as a system-prompt section.

    Required arguments are marked with "*". Returns "" for no prompts.
    """
    if not prompts:
        return ""

    lines = []
    for prompt in prompts:
        entry = f"- **{prompt.name}** ({prompt.backend})"
        if prompt.description:
            entry += f"\n  {prompt.description}"
        if prompt.arguments:
            names = ", ".join(
                f"{a.name}{'*' if a.required else ''}" for a in prompt.arguments
            )
            entry += f"\nArguments: {names}"
        lines.append(entry)

    return (
        "## Available Prompts\n\n"
        "The following prompt templates are available from backends:\n\n"
        + "\n".join(lines)
        + "\n\nYou can reference these prompts when needed."
    )


def format_prompt_messages(prompt: RenderedPrompt) -> str:
    """Flatten prompt messages to "ROLE: content" blocks."""
    return "\n\n".join(f"{m.role.upper()}: {m.content}" for m in prompt.messages)


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    record = as_mapping(content)
    if record is not None:
        text = record.get("text")
        if isinstance(text, str):
            return text
        return json.dumps(dict(record), default=str)
    return str(content)
