"""
Pending-Allocation Editor

Holds an in-memory draft of one project-month's allocation hours, shows the
budget left under the draft, and on save writes only what changed.

States:
    CLEAN  --set_hours-->  DIRTY  --save-->  SAVING  --ok-->    CLEAN
                                                     --error--> DIRTY (draft kept)
"""

from enum import Enum
from typing import Dict, Mapping, Optional

from hourbook.core.dates import DateLike, month_key
from hourbook.core.errors import HourbookError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.validation import finite_number
from hourbook.projects.allocations import AllocationStore
from hourbook.timetracker import reconciliation as rec

logger = get_logger("hourbook.timetracker.editor")


class EditorState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


def _positive(hours: Mapping[str, float]) -> Dict[str, float]:
    return {u: float(h) for u, h in hours.items() if h is not None and float(h) > 0}


class PendingAllocationEditor:
    def __init__(
        self,
        allocations: AllocationStore,
        project_id: str,
        month: DateLike,
        *,
        baseline: Mapping[str, float],
        rates: Mapping[str, float],
        budget: float,
    ):
        self._allocations = allocations
        self.project_id = project_id
        self.month_date = month_key(month)
        self.rates = dict(rates)
        self.budget = float(budget)
        self._baseline = _positive(baseline)
        self._draft: Dict[str, float] = dict(self._baseline)
        self.state = EditorState.CLEAN
        self.last_error: Optional[HourbookError] = None

    @property
    def baseline(self) -> Dict[str, float]:
        return dict(self._baseline)

    @property
    def draft(self) -> Dict[str, float]:
        return dict(self._draft)

    def hours(self, user_id: str) -> float:
        return self._draft.get(user_id, 0.0)

    @property
    def has_changes(self) -> bool:
        return _positive(self._draft) != self._baseline

    @property
    def remaining_budget(self) -> float:
        """Budget left if the draft were saved."""
        return rec.remaining_budget(self.budget, self._draft, self.rates)

    @property
    def over_budget(self) -> bool:
        return self.remaining_budget < 0

    def max_hours(self, user_id: str) -> rec.MaxHours:
        return rec.max_hours(self.budget, self.rates.get(user_id, 0.0))

    def set_hours(self, user_id: str, hours: float) -> None:
        if self.state is EditorState.SAVING:
            raise ValidationError("Save in progress; edits are locked")
        hours = finite_number(hours, "Allocated hours")
        if hours < 0:
            raise ValidationError("Allocated hours must not be negative")
        self._draft[user_id] = hours
        self.state = EditorState.DIRTY

    def diff(self) -> Dict[str, float]:
        """
        Changes to submit: changed positive hours become upserts, baseline
        users dropped to zero (or removed) become deletes (0). Zero entries
        with no persisted row are left out.
        """
        wanted = _positive(self._draft)
        changes = {u: h for u, h in wanted.items() if self._baseline.get(u) != h}
        for user_id in self._baseline:
            if user_id not in wanted:
                changes[user_id] = 0.0
        return changes

    def save(self) -> Dict[str, float]:
        """
        Write the diff through the allocation batch path.

        Returns:
            The submitted changes (empty when nothing changed)

        Raises:
            HourbookError: the batch failed; the draft is kept and the
            editor stays DIRTY so the user can save again
        """
        if self.state is EditorState.SAVING:
            raise ValidationError("Save already in progress")
        changes = self.diff()
        if not changes:
            self._draft = dict(self._baseline)
            self.state = EditorState.CLEAN
            return {}

        self.state = EditorState.SAVING
        try:
            self._allocations.apply_allocations(self.project_id, self.month_date, changes)
        except HourbookError as exc:
            self.last_error = exc
            self.state = EditorState.DIRTY
            logger.warning(
                "Saving allocations for %s/%s failed: %s",
                self.project_id, self.month_date, exc,
            )
            raise

        self._baseline = _positive(self._draft)
        self._draft = dict(self._baseline)
        self.last_error = None
        self.state = EditorState.CLEAN
        return changes

    def discard(self) -> None:
        """Drop the draft and return to the persisted baseline."""
        if self.state is EditorState.SAVING:
            raise ValidationError("Save in progress")
        self._draft = dict(self._baseline)
        self.state = EditorState.CLEAN

    def rebase(self, baseline: Mapping[str, float]) -> None:
        """Adopt freshly re-read persisted hours as the new baseline."""
        if self.state is EditorState.SAVING:
            raise ValidationError("Save in progress")
        self._baseline = _positive(baseline)
        self._draft = dict(self._baseline)
        self.last_error = None
        self.state = EditorState.CLEAN
