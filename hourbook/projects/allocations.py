"""
Monthly Allocation Store

Planned hours per (project, user, month). A row never holds zero hours:
writing zero or less deletes the row, and reads report "not set" for a
missing row so callers can tell it apart from an explicit value.
"""

from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, List, Mapping, Optional

from hourbook.core.concurrency import gather_settled
from hourbook.core.dates import DateLike, month_key
from hourbook.core.errors import BatchError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore, new_id
from hourbook.core.retry import RetryPolicy, fetch_with_retry
from hourbook.core.validation import finite_number

logger = get_logger("hourbook.projects.allocations")

TABLE = "monthly_allocations"
CONFLICT_KEY = ("project_id", "user_id", "month_date")


@dataclass(frozen=True)
class AllocationRead:
    """Result of reading one allocation; ``hours`` is None when no row exists."""

    user_id: str
    month_date: str
    hours: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.hours is not None


class AllocationStore:
    def __init__(
        self,
        records: RecordStore,
        policy: Optional[RetryPolicy] = None,
        *,
        max_workers: int = 8,
    ):
        self._records = records
        self._policy = policy
        self._max_workers = max_workers

    def upsert_allocation(
        self, project_id: str, user_id: str, month: DateLike, hours: float
    ) -> Optional[Dict[str, Any]]:
        """
        Set a user's hours for a month.

        hours > 0 overwrites any existing row for (project, user, month);
        hours <= 0 deletes the row if present.

        Returns:
            The written row, or None when the row was deleted
        """
        if not user_id:
            raise ValidationError("Allocation needs a user id")
        key = month_key(month)
        hours = finite_number(hours, "Allocated hours")
        if hours > 0:
            row = self._records.upsert(
                TABLE,
                {
                    "id": new_id(),
                    "project_id": project_id,
                    "user_id": user_id,
                    "month_date": key,
                    "allocated_hours": hours,
                },
                CONFLICT_KEY,
            )
            logger.debug("Allocated %.2fh to %s for %s", hours, user_id, key)
            return row

        self._records.delete(
            TABLE,
            filters={"project_id": project_id, "user_id": user_id, "month_date": key},
        )
        logger.debug("Cleared allocation for %s in %s", user_id, key)
        return None

    def apply_allocations(
        self, project_id: str, month: DateLike, hours_by_user: Mapping[str, float]
    ) -> None:
        """
        Apply one upsert/delete per user for a single month.

        Operations run independently and concurrently. If any fails a
        BatchError is raised after all have finished; the others may have
        persisted, so callers re-read to see the outcome.
        """
        if not hours_by_user:
            return

        items = list(hours_by_user.items())
        settled = gather_settled(
            {
                user_id: partial(self.upsert_allocation, project_id, user_id, month, hours)
                for user_id, hours in items
            },
            max_workers=self._max_workers,
        )

        failures = [r for r in settled.values() if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "Allocation batch for project %s, %s: %d of %d failed",
                project_id, month_key(month), len(failures), len(items),
            )
            raise BatchError(failures, total=len(items))
        logger.info(
            "Applied %d allocations for project %s, %s",
            len(items), project_id, month_key(month),
        )

    def list_allocations(self, project_id: str) -> List[Dict[str, Any]]:
        """All allocation rows for a project, ascending by month."""
        return fetch_with_retry(
            lambda: self._records.select(
                TABLE, filters={"project_id": project_id}, order_by="month_date"
            ),
            self._policy,
            label="list_allocations",
        )

    def get_allocation(
        self, project_id: str, user_id: str, month: DateLike
    ) -> AllocationRead:
        key = month_key(month)
        rows = fetch_with_retry(
            lambda: self._records.select(
                TABLE,
                filters={"project_id": project_id, "user_id": user_id, "month_date": key},
            ),
            self._policy,
            label="get_allocation",
        )
        hours = float(rows[0]["allocated_hours"]) if rows else None
        return AllocationRead(user_id=user_id, month_date=key, hours=hours)

    def month_allocations(
        self, project_id: str, month: DateLike
    ) -> Dict[str, AllocationRead]:
        """Allocations that exist for the month, keyed by user id."""
        key = month_key(month)
        rows = fetch_with_retry(
            lambda: self._records.select(
                TABLE, filters={"project_id": project_id, "month_date": key}
            ),
            self._policy,
            label="month_allocations",
        )
        return {
            r["user_id"]: AllocationRead(
                user_id=r["user_id"], month_date=key, hours=float(r["allocated_hours"])
            )
            for r in rows
        }
