"""
Monthly Budget Store

Per-project, per-month budget amounts. Writes replace whole months; reads
are retried on transport failures.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from hourbook.core.dates import DateLike, month_key, month_range
from hourbook.core.errors import ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore, new_id
from hourbook.core.retry import RetryPolicy, fetch_with_retry
from hourbook.core.validation import finite_number

logger = get_logger("hourbook.projects.budgets")

TABLE = "project_budgets"


def nonzero_budgets(window: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop months whose amount is not positive; applied before replace_budgets()."""
    return [dict(b) for b in window if float(b.get("budget_amount") or 0) > 0]


class BudgetStore:
    def __init__(self, records: RecordStore, policy: Optional[RetryPolicy] = None):
        self._records = records
        self._policy = policy

    def replace_budgets(
        self, project_id: str, budgets: Sequence[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Replace the budget rows for every month present in ``budgets``.

        Existing rows for those months are deleted and the full list is
        inserted in one transaction; a rejected insert leaves them intact.
        Months absent from the list are left alone; months present are
        overwritten even when the amount is unchanged.

        Args:
            project_id: Owning project
            budgets: Items with ``month_date`` and ``budget_amount``

        Returns:
            The inserted rows
        """
        rows: List[Dict[str, Any]] = []
        seen = set()
        for item in budgets:
            key = month_key(item["month_date"])
            amount = finite_number(item["budget_amount"], f"Budget for {key}")
            if amount < 0:
                raise ValidationError(f"Budget for {key} must not be negative")
            if key in seen:
                raise ValidationError(f"Duplicate budget month: {key}")
            seen.add(key)
            rows.append({
                "id": new_id(),
                "project_id": project_id,
                "month_date": key,
                "budget_amount": amount,
            })

        if not rows:
            return []

        inserted = self._records.replace(
            TABLE,
            rows,
            filters={"project_id": project_id},
            in_filters={"month_date": sorted(seen)},
        )
        logger.info("Replaced %d budget months for project %s", len(inserted), project_id)
        return inserted

    def list_budgets(self, project_id: str) -> List[Dict[str, Any]]:
        """All budget rows for a project, ascending by month."""
        return fetch_with_retry(
            lambda: self._records.select(
                TABLE, filters={"project_id": project_id}, order_by="month_date"
            ),
            self._policy,
            label="list_budgets",
        )

    def budget_for_month(self, project_id: str, month: DateLike) -> float:
        """Budget amount for the month of ``month``; 0 when none is set."""
        key = month_key(month)
        rows = fetch_with_retry(
            lambda: self._records.select(
                TABLE, filters={"project_id": project_id, "month_date": key}
            ),
            self._policy,
            label="budget_for_month",
        )
        return float(rows[0]["budget_amount"]) if rows else 0.0

    def edit_window(
        self, project_id: str, start: DateLike, months: int = 12
    ) -> List[Dict[str, Any]]:
        """Forward window of months pre-filled from existing budgets (0 when unset)."""
        existing = {r["month_date"]: r["budget_amount"] for r in self.list_budgets(project_id)}
        window = []
        for month in month_range(start, months):
            key = month.isoformat()
            window.append({
                "month_date": key,
                "budget_amount": float(existing.get(key, 0) or 0),
            })
        return window
