"""
Team Member Store

One row per (project, user) with the member's hourly rate and an
informational monthly hours budget. Removing a member leaves their
allocations in place.
"""

from typing import Any, Dict, List, Optional

from hourbook.core.errors import NotFoundError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore
from hourbook.core.retry import RetryPolicy, fetch_with_retry
from hourbook.core.validation import finite_number

logger = get_logger("hourbook.projects.members")

TABLE = "project_users"


def _check_rate(rate_per_hour: float) -> float:
    rate = finite_number(rate_per_hour, "Hourly rate")
    if rate < 0:
        raise ValidationError("Hourly rate must not be negative")
    return rate


class MemberStore:
    def __init__(self, records: RecordStore, policy: Optional[RetryPolicy] = None):
        self._records = records
        self._policy = policy

    def add_member(
        self,
        project_id: str,
        user_id: str,
        rate_per_hour: float,
        monthly_hours_budget: float = 0,
    ) -> Dict[str, Any]:
        if not user_id:
            raise ValidationError("Team member needs a user id")
        row = {
            "project_id": project_id,
            "user_id": user_id,
            "rate_per_hour": _check_rate(rate_per_hour),
            "monthly_hours_budget": finite_number(
                monthly_hours_budget or 0, "Monthly hours budget"
            ),
        }
        self._records.insert(TABLE, [row])
        logger.info("Added %s to project %s at %.2f/h", user_id, project_id, row["rate_per_hour"])
        return row

    def update_member(
        self,
        project_id: str,
        user_id: str,
        *,
        rate_per_hour: Optional[float] = None,
        monthly_hours_budget: Optional[float] = None,
    ) -> None:
        values: Dict[str, Any] = {}
        if rate_per_hour is not None:
            values["rate_per_hour"] = _check_rate(rate_per_hour)
        if monthly_hours_budget is not None:
            values["monthly_hours_budget"] = finite_number(
                monthly_hours_budget, "Monthly hours budget"
            )
        if not values:
            return
        count = self._records.update(
            TABLE, values, filters={"project_id": project_id, "user_id": user_id}
        )
        if count == 0:
            raise NotFoundError("team member", f"{project_id}/{user_id}")

    def remove_member(self, project_id: str, user_id: str) -> None:
        """Remove the member row. Their allocations are not touched."""
        self._records.delete(TABLE, filters={"project_id": project_id, "user_id": user_id})
        logger.info("Removed %s from project %s", user_id, project_id)

    def list_members(self, project_id: str) -> List[Dict[str, Any]]:
        return fetch_with_retry(
            lambda: self._records.select(
                TABLE, filters={"project_id": project_id}, order_by="created_at"
            ),
            self._policy,
            label="list_members",
        )

    def rates(self, project_id: str) -> Dict[str, float]:
        """Hourly rate by user id."""
        return {m["user_id"]: float(m["rate_per_hour"]) for m in self.list_members(project_id)}
