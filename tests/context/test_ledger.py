"""Tests for the data-context ledger and history tracking."""

from toolstream.context import (
    DataContextLedger,
    DatasetLabel,
    DatasetRule,
    KeywordDatasetLabeler,
    build_data_context,
    canonical_args,
    get_cached_result,
    is_redundant,
    update_ledger,
)
from toolstream.core.protocols import DatasetLabeler
from toolstream.events import (
    PromptFetchEvent,
    ResourceFetchEvent,
    ToolCallEvent,
    ToolState,
)

from tests.fixtures import make_message, resource_fetch_part


def completed(tool_name: str, args: dict, result=None, call_id=None, position=0) -> ToolCallEvent:
    return ToolCallEvent(
        tool_name=tool_name,
        args=args,
        result=result if result is not None else "ok",
        state=ToolState.COMPLETED,
        tool_call_id=call_id,
        position=position,
    )


def fold(events, ledger=None, **kwargs) -> DataContextLedger:
    return update_ledger(
        ledger or DataContextLedger(),
        events,
        message_id=kwargs.pop("message_id", "m1"),
        turn_index=kwargs.pop("turn_index", 0),
        timestamp=kwargs.pop("timestamp", 100.0),
        **kwargs,
    )


class TestCanonicalArgs:
    """Order-independent argument keys."""

    def test_key_order_does_not_matter(self):
        assert canonical_args({"a": 1, "b": {"y": 2, "x": 1}}) == canonical_args(
            {"b": {"x": 1, "y": 2}, "a": 1}
        )

    def test_none_is_empty(self):
        assert canonical_args(None) == "{}"


class TestUpdateLedger:
    """Appending tool calls and fetches."""

    def test_records_tool_call(self):
        ledger = fold([completed("eda__load", {"path": "a.csv"})])

        assert len(ledger.tool_calls) == 1
        call = ledger.tool_calls[0]
        assert call.tool_name == "eda__load"
        assert call.message_id == "m1"
        assert call.timestamp == 100.0
        assert ledger.last_updated == 100.0

    def test_is_pure(self):
        """The input ledger is left untouched."""
        empty = DataContextLedger()

        fold([completed("eda__load", {})], ledger=empty)

        assert empty.tool_calls == ()
        assert empty.is_empty is True

    def test_duplicates_are_appended_not_merged(self):
        """Same key twice yields two entries."""
        ledger = fold([completed("eda__load", {"p": 1})])
        ledger = fold([completed("eda__load", {"p": 1}, result="second")], ledger, message_id="m2")

        assert len(ledger.tool_calls) == 2
        assert [c.message_id for c in ledger.tool_calls] == ["m1", "m2"]

    def test_failed_calls_not_recorded(self):
        failed = ToolCallEvent(tool_name="eda__load", state=ToolState.ERROR, error_text="boom")

        ledger = fold([failed])

        assert ledger.tool_calls == ()
        assert is_redundant("eda__load", {}, ledger) is False

    def test_call_and_result_paired_by_id(self):
        """A call part and its result part become one summary."""
        call = ToolCallEvent(tool_name="eda__describe", args={"c": 1}, tool_call_id="x", position=0)
        result = ToolCallEvent(
            tool_name="eda__describe",
            result="mean=1",
            state=ToolState.COMPLETED,
            tool_call_id="x",
            position=1,
        )

        ledger = fold([call, result])

        assert len(ledger.tool_calls) == 1
        assert ledger.tool_calls[0].args == {"c": 1}
        assert ledger.tool_calls[0].result == "mean=1"

    def test_only_complete_fetches_recorded(self):
        events = [
            ResourceFetchEvent(backend="eda", uri="file:///a.csv", status="fetching", name="a.csv"),
            ResourceFetchEvent(backend="eda", uri="file:///a.csv", status="complete", name="a.csv"),
            ResourceFetchEvent(backend="eda", uri="file:///b.csv", status="error", name="b.csv"),
            PromptFetchEvent(backend="eda", prompt_name="summarize", status="complete", args={"d": 1}),
        ]

        ledger = fold(events)

        assert [r.uri for r in ledger.resource_fetches] == ["file:///a.csv"]
        assert [p.prompt_name for p in ledger.prompt_fetches] == ["summarize"]
        assert ledger.available_information == (
            "Resource: a.csv from eda",
            "Prompt: summarize from eda",
        )

    def test_nothing_new_returns_same_ledger(self):
        ledger = fold([completed("eda__load", {})])

        assert fold([], ledger) is ledger


class TestRedundancy:
    """is_redundant and get_cached_result."""

    def test_redundant_regardless_of_key_order(self):
        ledger = fold([completed("eda__load", {"path": "a.csv", "sep": ","})])

        assert is_redundant("eda__load", {"sep": ",", "path": "a.csv"}, ledger) is True

    def test_different_args_not_redundant(self):
        ledger = fold([completed("eda__load", {"path": "a.csv"})])

        assert is_redundant("eda__load", {"path": "b.csv"}, ledger) is False
        assert is_redundant("other__load", {"path": "a.csv"}, ledger) is False

    def test_cached_result_is_most_recent(self):
        ledger = fold([completed("eda__load", {"p": 1}, result="old")])
        ledger = fold([completed("eda__load", {"p": 1}, result="new")], ledger)

        assert get_cached_result("eda__load", {"p": 1}, ledger) == "new"
        assert get_cached_result("eda__load", {"p": 2}, ledger) is None


class TestDatasetLabels:
    """Pluggable dataset labeling."""

    def test_custom_labeler(self):
        class Labeler:
            def label(self, tool_name, args, result):
                return DatasetLabel(dataset=args["path"], information=("columns",))

        assert isinstance(Labeler(), DatasetLabeler)

        ledger = fold([completed("eda__load", {"path": "a.csv"})], labeler=Labeler())

        assert ledger.loaded_datasets == ("a.csv",)
        assert ledger.available_information == ("columns",)

    def test_no_labeler_no_datasets(self):
        ledger = fold([completed("eda__load", {"path": "a.csv"})])

        assert ledger.loaded_datasets == ()

    def test_keyword_labeler(self):
        labeler = KeywordDatasetLabeler(
            [
                DatasetRule(keywords=["compound"], dataset="Compound list", information=["formulas"]),
                DatasetRule(keywords=["load"], dataset="Dataset"),
            ]
        )

        label = labeler.label("eda__load_compounds", {}, {"rowCount": 12})

        assert label == DatasetLabel(dataset="Compound list (12 rows)", information=("formulas",))
        assert labeler.label("eda__load_table", {}, None).dataset == "Dataset"
        assert labeler.label("eda__describe", {}, None) is None

    def test_keyword_rule_backend_filter(self):
        labeler = KeywordDatasetLabeler([DatasetRule(keywords=["load"], dataset="X", backend="lab")])

        assert labeler.label("eda__load", {}, None) is None
        assert labeler.label("lab__load", {}, None).dataset == "X"

    def test_datasets_are_deduplicated(self):
        labeler = KeywordDatasetLabeler([DatasetRule(keywords=["load"], dataset="Dataset")])

        ledger = fold(
            [completed("eda__load", {"p": 1}), completed("eda__load", {"p": 2})], labeler=labeler
        )

        assert ledger.loaded_datasets == ("Dataset",)


class TestBuildDataContext:
    """Folding a whole conversation history."""

    def test_assistant_messages_only(self, local_parts):
        messages = [
            make_message("u1", local_parts, role="user"),
            make_message("a1", local_parts),
        ]

        ledger = build_data_context(messages, timestamp=1.0)

        assert len(ledger.tool_calls) == 1
        call = ledger.tool_calls[0]
        assert call.tool_name == "uv-mcp__load_csv"
        assert call.message_id == "a1"
        assert call.turn_index == 1

    def test_direct_call_and_result_paired(self, direct_parts):
        ledger = build_data_context([make_message("a1", direct_parts)])

        assert len(ledger.tool_calls) == 1
        assert ledger.tool_calls[0].result == "mean a=1.0"
        assert is_redundant("eda__describe", {"columns": ["a", "b"]}, ledger) is True

    def test_all_transports(self, local_parts, remote_parts, direct_parts):
        ledger = build_data_context(
            [
                make_message("a1", local_parts),
                make_message("a2", remote_parts),
                make_message("a3", direct_parts),
            ]
        )

        assert [c.tool_name for c in ledger.tool_calls] == [
            "uv-mcp__load_csv",
            "railway-eda__get_compounds",
            "eda__describe",
        ]

    def test_resource_fetches_from_history(self):
        ledger = build_data_context(
            [
                make_message(
                    "a1",
                    [
                        resource_fetch_part("eda", "file:///data/a.csv", "fetching"),
                        resource_fetch_part("eda", "file:///data/a.csv"),
                    ],
                )
            ]
        )

        assert [r.name for r in ledger.resource_fetches] == ["a.csv"]

    def test_empty_history(self):
        assert build_data_context([]).is_empty is True

    def test_messages_without_parts(self):
        ledger = build_data_context([{"id": "a1", "role": "assistant"}])

        assert ledger.is_empty is True
