"""Tests for the ledger summary injected into the system prompt."""

from toolstream.context import DataContextLedger, DatasetLabel, summarize, update_ledger
from toolstream.events import ResourceFetchEvent, ToolCallEvent, ToolState


def ledger_with_resources(count: int) -> DataContextLedger:
    events = [
        ResourceFetchEvent(
            backend="eda", uri=f"file:///r{i}.csv", status="complete", name=f"r{i}.csv", position=i
        )
        for i in range(count)
    ]
    return update_ledger(DataContextLedger(), events, message_id="m1", turn_index=0, timestamp=1.0)


class TestEmptyLedger:
    """Callers omit the section when the summary is empty."""

    def test_empty_ledger_is_empty_string(self):
        assert summarize(DataContextLedger(), budget=10_000) == ""

    def test_zero_budget(self):
        assert summarize(ledger_with_resources(1), budget=0) == ""


class TestRecency:
    """Only the most recent items of each category are listed."""

    def test_ten_resources_lists_last_three(self):
        summary = summarize(ledger_with_resources(10), budget=10_000)

        resource_line = next(line for line in summary.splitlines() if line.startswith("**Resources:**"))
        assert resource_line == "**Resources:** r7.csv (eda), r8.csv (eda), r9.csv (eda)"

    def test_items_per_category(self):
        summary = summarize(ledger_with_resources(10), budget=10_000, items_per_category=5)

        assert "r4.csv" not in summary
        assert "r5.csv (eda), r6.csv (eda)" in summary

    def test_sections(self):
        class Labeler:
            def label(self, tool_name, args, result):
                return DatasetLabel(dataset="Compound list", information=("formulas",))

        call = ToolCallEvent(
            tool_name="eda__load", args={"path": "a.csv"}, result="ok", state=ToolState.COMPLETED
        )
        ledger = update_ledger(
            DataContextLedger(), [call], message_id="m1", turn_index=0, labeler=Labeler()
        )

        summary = summarize(ledger, budget=10_000)

        assert summary.startswith("## Session Data Context\n")
        assert "**Datasets:** Compound list" in summary
        assert '**Tool calls:** eda__load({"path": "a.csv"})' in summary
        assert "**Available Info:** formulas" in summary
        assert "REUSE existing data" in summary


class TestBudget:
    """The summary never exceeds the budget."""

    def test_never_exceeds_budget(self):
        ledger = ledger_with_resources(10)

        for budget in range(0, 400, 7):
            assert len(summarize(ledger, budget=budget)) <= budget

    def test_shrinks_to_fit(self):
        """A tight budget drops older items before giving up."""
        ledger = ledger_with_resources(10)
        full = summarize(ledger, budget=10_000)

        tight = summarize(ledger, budget=len(full) - 1)

        assert tight != ""
        assert "r9.csv" in tight
        assert "r7.csv" not in tight

    def test_nothing_fits(self):
        assert summarize(ledger_with_resources(3), budget=20) == ""
