"""Tests for the undo ledger."""

import pytest

from ledger_agent.tools.errors import UndoUnavailableError
from ledger_agent.tools.undo import NOTHING_TO_UNDO, ActionKind, UndoLedger, UndoRecord


class TestUndoLedger:
    """Tests for UndoLedger."""

    def test_empty_ledger_reports_nothing_to_undo(self):
        ledger = UndoLedger()

        assert ledger.undo_last() == "No operations to undo."
        assert len(ledger) == 0

    def test_pop_on_empty_raises(self):
        with pytest.raises(UndoUnavailableError):
            UndoLedger().pop()

    def test_delete_is_reported_as_not_reversible(self):
        """Undoing a DELETE pops the record and asks for manual recreation."""
        ledger = UndoLedger()
        ledger.record(UndoRecord(ActionKind.DELETE, "bankaccounts", "42"))

        result = ledger.undo_last()

        assert "Undo not supported for DELETE /bankaccounts/42." in result
        assert "manually recreate" in result
        assert len(ledger) == 0
        assert ledger.undo_last() == NOTHING_TO_UNDO

    def test_other_kinds_are_not_implemented(self):
        ledger = UndoLedger()
        ledger.record(
            UndoRecord(
                ActionKind.UPDATE_FIELDS,
                "bankaccounts",
                "42",
                extra={"cleared_fields": ["bank_name"]},
            )
        )

        result = ledger.undo_last()

        assert result == "Undo for this action type (UPDATE_FIELDS) is not implemented."
        assert len(ledger) == 0

    def test_records_pop_most_recent_first(self):
        ledger = UndoLedger()
        ledger.record(UndoRecord(ActionKind.DELETE, "dimensions", "1"))
        ledger.record(UndoRecord(ActionKind.DELETE, "glaccounts", "2"))

        assert "/glaccounts/2" in ledger.undo_last()
        assert "/dimensions/1" in ledger.undo_last()

    def test_records_returns_copy(self):
        ledger = UndoLedger()
        ledger.record(UndoRecord(ActionKind.UPDATE, "sales", "9"))

        ledger.records.clear()

        assert len(ledger) == 1
