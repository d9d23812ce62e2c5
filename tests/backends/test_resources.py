"""Tests for backend resource listing, reading and fetch parts."""

from toolstream.backends import (
    ResourceInfo,
    create_resource_fetch_part,
    fetch_resources_with_visibility,
    format_resources_for_prompt,
    list_all_resources,
    read_resource,
)
from toolstream.backends.resources import TRUNCATION_MARKER
from toolstream.events import ResourceFetchEvent, normalize_parts
from toolstream.testing import FakeBackendSession


class BlobSession(FakeBackendSession):
    """Backend whose resources carry binary blobs."""

    async def read_resource(self, uri):
        self.resource_reads.append(uri)
        return {
            "contents": [
                {"uri": uri, "mimeType": "image/png", "blob": "QUJD" * 10},
                {"uri": uri, "text": " caption"},
            ]
        }


class TestListAllResources:
    """Concurrent listing across backends."""

    async def test_lists_every_backend(self, eda_backend):
        other = FakeBackendSession(resources=[{"uri": "db://tables/users", "name": "users"}])

        result = await list_all_resources({"eda": eda_backend, "db": other})

        assert result.total_count == 3
        assert {r.backend for r in result.resources} == {"eda", "db"}
        assert result.failures == {}

    async def test_name_defaults_to_last_uri_segment(self, eda_backend):
        result = await list_all_resources({"eda": eda_backend})

        notes = next(r for r in result.resources if r.uri.endswith("notes.md"))
        assert notes.name == "notes.md"
        assert notes.mime_type == "text/markdown"

    async def test_failing_backend_skipped(self, eda_backend):
        broken = FakeBackendSession(fail_on={"list_resources"})

        result = await list_all_resources({"eda": eda_backend, "broken": broken})

        assert result.total_count == 2
        assert result.failures["broken"].operation == "list_resources"

    async def test_filter(self, eda_backend):
        result = await list_all_resources(
            {"eda": eda_backend}, resource_filter=lambda r: r.mime_type == "text/csv"
        )

        assert [r.name for r in result.resources] == ["compounds.csv"]

    def test_to_dict(self):
        info = ResourceInfo(backend="eda", uri="file:///a", name="a", mime_type="text/plain")

        assert info.to_dict() == {
            "server": "eda",
            "uri": "file:///a",
            "name": "a",
            "description": None,
            "mimeType": "text/plain",
        }


class TestReadResource:
    """Flattening resource contents to text."""

    async def test_text_content(self, eda_backend):
        read = await read_resource(eda_backend, "file:///data/notes.md")

        assert read.content == "# Notes"
        assert read.mime_type == "text/plain"

    async def test_truncation(self):
        backend = FakeBackendSession(resource_contents={"file:///big": "x" * 100})

        read = await read_resource(backend, "file:///big", max_size=10)

        assert read.content == "x" * 10 + TRUNCATION_MARKER

    async def test_binary_placeholder(self):
        backend = BlobSession()

        read = await read_resource(backend, "file:///img.png")

        assert read.content == "[Binary content: 40 chars base64] caption"
        assert read.mime_type == "image/png"


class TestFetchWithVisibility:
    """resource-fetch parts for the conversation."""

    async def test_fetching_then_complete(self, eda_backend):
        parts = await fetch_resources_with_visibility(
            {"eda": eda_backend}, [("eda", "file:///data/notes.md")]
        )

        assert [p["status"] for p in parts] == ["fetching", "complete"]
        assert parts[1]["resource"]["content"] == "# Notes"
        assert parts[1]["resource"]["name"] == "notes.md"

    async def test_error_part(self, eda_backend):
        parts = await fetch_resources_with_visibility(
            {"eda": eda_backend}, [("eda", "file:///missing")]
        )

        assert [p["status"] for p in parts] == ["fetching", "error"]
        assert "missing" in parts[1]["error"]

    async def test_unknown_backend_skipped(self, eda_backend):
        parts = await fetch_resources_with_visibility({"eda": eda_backend}, [("nope", "x")])

        assert parts == []

    async def test_parts_normalize(self, eda_backend):
        """The produced parts are understood by the normalizer."""
        parts = await fetch_resources_with_visibility(
            {"eda": eda_backend}, [("eda", "file:///data/compounds.csv")]
        )

        events = normalize_parts(parts)

        assert all(isinstance(e, ResourceFetchEvent) for e in events)
        assert events[-1].status == "complete"
        assert events[-1].content.startswith("name,formula")

    def test_error_only_on_error_parts(self):
        part = create_resource_fetch_part("eda", "file:///a", "fetching", error="ignored")

        assert "error" not in part
        assert "resource" not in part


class TestFormatResources:
    """System-prompt section for fetched resources."""

    def test_complete_resources_rendered(self):
        resources = [
            ResourceFetchEvent(
                backend="eda",
                uri="file:///a.csv",
                status="complete",
                name="a.csv",
                content="x,y",
                mime_type="text/csv",
            ),
            ResourceFetchEvent(backend="eda", uri="file:///b.csv", status="error", name="b.csv"),
        ]

        text = format_resources_for_prompt(resources)

        assert text.startswith("## Available Resources\n\n### Resource: a.csv (eda)")
        assert "Type: text/csv" in text
        assert "x,y" in text
        assert "b.csv" not in text

    def test_nothing_complete(self):
        assert format_resources_for_prompt([]) == ""
