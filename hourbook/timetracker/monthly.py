"""
Monthly Reconciler

Fetches one project-month's inputs concurrently and hands them to the pure
reconciliation functions. Store reads are joined all-or-nothing; the
elapsed-days read never fails.
"""

from datetime import date
from functools import partial
from typing import Optional

from hourbook.core.concurrency import gather
from hourbook.core.dates import DateLike, month_key, month_start
from hourbook.core.logging import get_logger
from hourbook.projects.allocations import AllocationStore
from hourbook.projects.budgets import BudgetStore
from hourbook.projects.members import MemberStore
from hourbook.timetracker.editor import PendingAllocationEditor
from hourbook.timetracker.logs import LogStore
from hourbook.timetracker.reconciliation import (
    MonthSummary,
    normalize_allocations,
    summarize_month,
)
from hourbook.timetracker.working_days import WorkingDaysOracle

logger = get_logger("hourbook.timetracker.monthly")


class MonthlyReconciler:
    def __init__(
        self,
        budgets: BudgetStore,
        members: MemberStore,
        allocations: AllocationStore,
        logs: LogStore,
        working_days: WorkingDaysOracle,
        *,
        max_workers: int = 8,
    ):
        self.budgets = budgets
        self.members = members
        self.allocations = allocations
        self.logs = logs
        self.working_days = working_days
        self._max_workers = max_workers

    def _elapsed_days(self, month: date, today: date, total: int) -> int:
        if month == month_start(today):
            return self.working_days.elapsed_working_days_to_date(today)
        if month < month_start(today):
            return total
        return 0

    def summary(
        self, project_id: str, month: DateLike, today: Optional[date] = None
    ) -> MonthSummary:
        today = today or date.today()
        start = month_start(month)
        parts = gather(
            {
                "budget": partial(self.budgets.budget_for_month, project_id, start),
                "rates": partial(self.members.rates, project_id),
                "allocations": partial(self.allocations.month_allocations, project_id, start),
                "logs": partial(self.logs.fetch_month, project_id, start),
                "total_days": partial(self.working_days.working_days_in_month, start),
            },
            max_workers=self._max_workers,
        )
        total = parts["total_days"]
        return summarize_month(
            month_date=month_key(start),
            budget=parts["budget"],
            rates=parts["rates"],
            allocations=parts["allocations"],
            logs=parts["logs"],
            total_working_days=total,
            elapsed_working_days=self._elapsed_days(start, today, total),
            is_current_month=start == month_start(today),
        )

    def editor(self, project_id: str, month: DateLike) -> PendingAllocationEditor:
        """Editor seeded with the month's persisted allocations, rates and budget."""
        start = month_start(month)
        parts = gather(
            {
                "budget": partial(self.budgets.budget_for_month, project_id, start),
                "rates": partial(self.members.rates, project_id),
                "allocations": partial(self.allocations.month_allocations, project_id, start),
            },
            max_workers=self._max_workers,
        )
        return PendingAllocationEditor(
            self.allocations,
            project_id,
            start,
            baseline=normalize_allocations(parts["allocations"]),
            rates=parts["rates"],
            budget=parts["budget"],
        )
