"""Protocols for the collaborators toolstream consumes but does not own."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from toolstream.context.ledger import DatasetLabel


@runtime_checkable
class BackendSession(Protocol):
    """
    An established session with one tool/resource/prompt backend.

    Connection setup, transport and authentication live outside toolstream;
    the catalog and the resource/prompt helpers only need these calls.
    Return values are transport records (dicts or MCP SDK models).

    Implementations: McpBackendSession (mcp.ClientSession), FakeBackendSession (testing)
    """

    async def list_tools(self) -> list[Any]:
        """List tool definitions: name, description, inputSchema."""
        ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Invoke a tool. Result carries a `content` list of typed items."""
        ...

    async def list_resources(self) -> list[Any]:
        """List resources: uri, name, title, description, mimeType."""
        ...

    async def read_resource(self, uri: str) -> Any:
        """Read a resource. Result carries a `contents` list (text or blob)."""
        ...

    async def list_prompts(self) -> list[Any]:
        """List prompt templates: name, title, description, arguments."""
        ...

    async def get_prompt(self, name: str, arguments: dict[str, Any]) -> Any:
        """Render a prompt template. Result carries description and messages."""
        ...


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies out-of-band bearer credentials per backend."""

    def get_credential(self, backend: str) -> str | None:
        """
        Return the credential for a backend.

        Args:
            backend: Backend name as used in the tool namespace

        Returns:
            Credential string (optionally "Bearer "-prefixed) or None
        """
        ...


@runtime_checkable
class DatasetLabeler(Protocol):
    """
    Maps a completed tool call to a human-readable dataset label.

    Labeling is backend knowledge; toolstream ships no built-in guesses.
    """

    def label(
        self, tool_name: str, args: dict[str, Any], result: Any
    ) -> "DatasetLabel | None":
        """Return a label for the data this call loaded, or None."""
        ...
