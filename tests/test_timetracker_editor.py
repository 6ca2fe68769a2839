"""Tests for the pending-allocation editor state machine."""

import pytest

from hourbook.core.errors import BatchError, ValidationError
from hourbook.timetracker.editor import EditorState, PendingAllocationEditor
from hourbook.timetracker.reconciliation import Cap

MONTH = "2026-02-01"


class RecordingAllocations:
    """Captures submitted batches; optionally fails or runs a hook mid-save."""

    def __init__(self, error=None, during=None):
        self.error = error
        self.during = during
        self.batches = []

    def apply_allocations(self, project_id, month, hours_by_user):
        self.batches.append((project_id, month, dict(hours_by_user)))
        if self.during:
            self.during()
        if self.error:
            raise self.error


def _editor(allocations, baseline=None, budget=1000):
    return PendingAllocationEditor(
        allocations,
        "p1",
        MONTH,
        baseline=baseline or {},
        rates={"alice": 50, "bob": 100, "free": 0},
        budget=budget,
    )


class TestDraft:
    def test_starts_clean(self):
        editor = _editor(RecordingAllocations(), {"alice": 10})
        assert editor.state is EditorState.CLEAN
        assert not editor.has_changes
        assert editor.hours("alice") == 10
        assert editor.hours("bob") == 0

    def test_set_hours_marks_dirty(self):
        editor = _editor(RecordingAllocations())
        editor.set_hours("alice", 4)
        assert editor.state is EditorState.DIRTY
        assert editor.has_changes

    def test_negative_hours_rejected(self):
        editor = _editor(RecordingAllocations())
        with pytest.raises(ValidationError):
            editor.set_hours("alice", -1)
        assert editor.state is EditorState.CLEAN

    @pytest.mark.parametrize("hours", [float("nan"), float("inf")])
    def test_non_finite_hours_rejected(self, hours):
        editor = _editor(RecordingAllocations(), {"alice": 10})
        with pytest.raises(ValidationError):
            editor.set_hours("alice", hours)
        assert editor.state is EditorState.CLEAN
        assert editor.hours("alice") == 10
        assert editor.remaining_budget == 500

    def test_remaining_budget_tracks_draft(self):
        editor = _editor(RecordingAllocations())
        editor.set_hours("alice", 10)
        editor.set_hours("bob", 6)
        assert editor.remaining_budget == -100
        assert editor.over_budget

    def test_max_hours(self):
        editor = _editor(RecordingAllocations())
        assert editor.max_hours("alice") == 20
        assert editor.max_hours("free") is Cap.UNBOUNDED

    def test_diff_filters_zero_and_deletes_stale(self):
        editor = _editor(RecordingAllocations(), {"bob": 5, "alice": 10})
        editor.set_hours("alice", 10)
        editor.set_hours("bob", 0)
        editor.set_hours("free", 0)
        assert editor.diff() == {"bob": 0.0}

    def test_discard(self):
        editor = _editor(RecordingAllocations(), {"alice": 10})
        editor.set_hours("alice", 3)
        editor.discard()
        assert editor.hours("alice") == 10
        assert editor.state is EditorState.CLEAN


class TestSave:
    def test_save_submits_only_changes(self):
        allocations = RecordingAllocations()
        editor = _editor(allocations, {"bob": 5})
        editor.set_hours("alice", 10)
        editor.set_hours("bob", 0)

        assert editor.save() == {"alice": 10.0, "bob": 0.0}
        assert allocations.batches == [("p1", MONTH, {"alice": 10.0, "bob": 0.0})]
        assert editor.state is EditorState.CLEAN
        assert editor.baseline == {"alice": 10.0}

    def test_save_without_changes(self):
        allocations = RecordingAllocations()
        editor = _editor(allocations, {"alice": 10})
        editor.set_hours("alice", 10)
        assert editor.save() == {}
        assert allocations.batches == []
        assert editor.state is EditorState.CLEAN

    def test_failure_keeps_draft(self):
        error = BatchError([ValidationError("boom")], total=1)
        editor = _editor(RecordingAllocations(error=error), {"alice": 10})
        editor.set_hours("alice", 12)

        with pytest.raises(BatchError):
            editor.save()
        assert editor.state is EditorState.DIRTY
        assert editor.hours("alice") == 12
        assert editor.baseline == {"alice": 10.0}
        assert editor.last_error is error

    def test_edits_locked_while_saving(self):
        captured = []
        editor = None

        def try_edit():
            with pytest.raises(ValidationError):
                editor.set_hours("alice", 1)
            captured.append(editor.state)

        editor = _editor(RecordingAllocations(during=try_edit))
        editor.set_hours("alice", 5)
        editor.save()
        assert captured == [EditorState.SAVING]
        assert editor.hours("alice") == 5

    def test_rebase(self):
        editor = _editor(RecordingAllocations(), {"alice": 10})
        editor.set_hours("alice", 3)
        editor.rebase({"alice": 7, "bob": 0})
        assert editor.baseline == {"alice": 7.0}
        assert editor.state is EditorState.CLEAN


class TestSaveAgainstStore:
    def test_stale_row_deleted(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "bob", MONTH, 5)
        editor = services.reconciler.editor(seed_project, MONTH)
        assert editor.baseline == {"bob": 5.0}

        editor.set_hours("alice", 10)
        editor.set_hours("bob", 0)
        editor.save()

        month = services.allocations.month_allocations(seed_project, MONTH)
        assert {u: a.hours for u, a in month.items()} == {"alice": 10.0}

    def test_partial_failure_then_retry(self, services, seed_project):
        editor = services.reconciler.editor(seed_project, MONTH)
        editor.set_hours("alice", 10)
        editor.set_hours("", 2)
        with pytest.raises(BatchError):
            editor.save()
        assert editor.state is EditorState.DIRTY

        editor.set_hours("", 0)
        editor.save()
        assert editor.state is EditorState.CLEAN
        assert services.allocations.get_allocation(seed_project, "alice", MONTH).hours == 10.0
