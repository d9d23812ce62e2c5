"""Exception hierarchy for toolstream.

Most of these never escape the library: per-backend and per-call failures
are logged and turned into data (a dropped event, a skipped backend, an
error string returned as a tool result). They exist so that callers that
want the strict behaviour can catch one well-named type.
"""

from __future__ import annotations


class ToolstreamError(Exception):
    """Base class for all toolstream errors."""


class Unclassifiable(ToolstreamError):
    """A raw message part did not match any known event shape."""


class InvalidToolName(ToolstreamError):
    """A tool name is not exactly two `__`-separated segments."""

    def __init__(self, name: str | None):
        self.name = name
        super().__init__(f"Invalid namespaced tool name: {name!r}")


class InvalidStateTransition(ToolstreamError):
    """A tool call state moved backwards or left a terminal state."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move tool call from {current!r} to {requested!r}")


class BackendListFailure(ToolstreamError):
    """Listing tools, resources or prompts from one backend failed."""

    def __init__(self, backend: str, operation: str, cause: BaseException):
        self.backend = backend
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed for backend '{backend}': {cause}")


class DispatchFailure(ToolstreamError):
    """A tool invocation raised or returned an error result."""

    def __init__(self, tool: str, backend: str, message: str):
        self.tool = tool
        self.backend = backend
        self.message = message
        super().__init__(f"{backend}__{tool} failed: {message}")


class SchemaSanitationConflict(ToolstreamError):
    """Two tools of the same backend collide after namespacing."""

    def __init__(self, backend: str, namespaced_name: str):
        self.backend = backend
        self.namespaced_name = namespaced_name
        super().__init__(
            f"Duplicate tool '{namespaced_name}' in backend '{backend}' tool list"
        )


class ConfigError(ToolstreamError):
    """Configuration file is present but invalid."""
