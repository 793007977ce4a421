"""Unit tests for the single-level undo ledger."""

from typing import List, Tuple

import pytest

from hemingway.models.edit import EditContext, EditEntry, WriteOutcome
from hemingway.services.edit_ledger import EditLedger

OK = WriteOutcome(success=True, file="index.html", line=1, match_count=1)
FAILED = WriteOutcome.failure("Text not found in source files")


class RecordingRewriter:
    """Fake rewriter that records calls and returns scripted outcomes."""

    def __init__(self, events: List[Tuple], failures=(), raises=()):
        self.events = events
        self.failures = set(failures)
        self.raises = set(raises)

    def __call__(self, old_text: str, new_text: str, context: EditContext) -> WriteOutcome:
        self.events.append(("rewrite", old_text, new_text, context.tag_name))
        if old_text in self.raises:
            raise RuntimeError(f"cannot reverse {old_text}")
        if old_text in self.failures:
            return FAILED
        return OK


@pytest.fixture
def events() -> List[Tuple]:
    return []


@pytest.fixture
def surface(events):
    def _surface(element, text):
        events.append(("surface", element, text))
    return _surface


def _entry(element: str, old: str, new: str, outcome: WriteOutcome = OK, tag: str = "") -> EditEntry:
    return EditEntry(element, old, new, outcome, EditContext(tag_name=tag))


class TestCommit:
    """Test snapshot storage."""

    def test_starts_empty(self, events):
        ledger = EditLedger(RecordingRewriter(events))

        assert not ledger.has_snapshot
        assert ledger.peek() is None
        assert ledger.undo() is None
        assert events == []

    def test_commit_stores_entries_in_order(self, events):
        ledger = EditLedger(RecordingRewriter(events))
        entries = [_entry("h1", "A", "B"), _entry("p", "C", "D")]

        snapshot = ledger.commit(entries)

        assert ledger.has_snapshot
        assert ledger.peek() is snapshot
        assert [e.element for e in snapshot.entries] == ["h1", "p"]

    def test_new_commit_discards_previous(self, events):
        ledger = EditLedger(RecordingRewriter(events))
        ledger.commit([_entry("h1", "A", "B")])
        ledger.commit([_entry("p", "C", "D")])

        snapshot = ledger.undo()

        assert [e.element for e in snapshot.entries] == ["p"]
        assert ("rewrite", "B", "A", "") not in events
        assert ledger.undo() is None

    def test_clear(self, events):
        ledger = EditLedger(RecordingRewriter(events))
        ledger.commit([_entry("h1", "A", "B")])

        ledger.clear()

        assert ledger.undo() is None


class TestUndo:
    """Test snapshot reversal."""

    def test_reverses_in_reverse_order_with_swapped_text(self, events, surface):
        ledger = EditLedger(RecordingRewriter(events), surface)
        ledger.commit([
            _entry("e1", "one", "ONE", tag="h1"),
            _entry("e2", "two", "TWO", tag="p"),
            _entry("e3", "three", "THREE", tag="li"),
        ])

        snapshot = ledger.undo()

        assert events == [
            ("surface", "e3", "three"),
            ("rewrite", "THREE", "three", "li"),
            ("surface", "e2", "two"),
            ("rewrite", "TWO", "two", "p"),
            ("surface", "e1", "one"),
            ("rewrite", "ONE", "one", "h1"),
        ]
        assert snapshot.fully_reverted
        assert snapshot.reversals == [OK, OK, OK]

    def test_snapshot_cleared_after_undo(self, events):
        ledger = EditLedger(RecordingRewriter(events))
        ledger.commit([_entry("e1", "one", "ONE")])

        ledger.undo()

        assert not ledger.has_snapshot
        assert ledger.undo() is None

    def test_failed_forward_write_only_reverts_visible_text(self, events, surface):
        ledger = EditLedger(RecordingRewriter(events), surface)
        ledger.commit([
            _entry("e1", "one", "ONE"),
            _entry("e2", "two", "TWO", outcome=FAILED),
        ])

        snapshot = ledger.undo()

        assert events == [
            ("surface", "e2", "two"),
            ("surface", "e1", "one"),
            ("rewrite", "ONE", "one", ""),
        ]
        assert snapshot.reversals == [OK, None]
        assert snapshot.fully_reverted

    def test_partial_failure_continues_and_is_reported(self, events, surface):
        ledger = EditLedger(RecordingRewriter(events, failures={"TWO"}), surface)
        ledger.commit([
            _entry("e1", "one", "ONE"),
            _entry("e2", "two", "TWO"),
            _entry("e3", "three", "THREE"),
        ])

        snapshot = ledger.undo()

        assert ("rewrite", "ONE", "one", "") in events
        assert ("surface", "e2", "two") in events
        assert not snapshot.fully_reverted
        assert [e.element for e in snapshot.failed_reversals] == ["e2"]
        assert not ledger.has_snapshot

    def test_raising_rewriter_is_recorded_as_failure(self, events, surface):
        ledger = EditLedger(RecordingRewriter(events, raises={"THREE"}), surface)
        ledger.commit([_entry("e1", "one", "ONE"), _entry("e3", "three", "THREE")])

        snapshot = ledger.undo()

        assert not snapshot.fully_reverted
        assert "cannot reverse THREE" in snapshot.reversals[1].error
        assert snapshot.reversals[0] == OK

    def test_raising_surface_does_not_stop_source_reversal(self, events):
        def broken_surface(element, text):
            raise RuntimeError("element detached")

        ledger = EditLedger(RecordingRewriter(events), broken_surface)
        ledger.commit([_entry("e1", "one", "ONE")])

        snapshot = ledger.undo()

        assert events == [("rewrite", "ONE", "one", "")]
        assert snapshot.fully_reverted
