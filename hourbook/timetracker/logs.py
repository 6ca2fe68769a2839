"""
Daily Log Store

Time entries per project, the ground truth for spent hours. The signed-in
user is stamped as the author on create; date, user and project never change
afterwards.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from hourbook.auth.identity import Identity
from hourbook.core.dates import DateLike, month_end, month_start, to_date
from hourbook.core.errors import NotFoundError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore, new_id
from hourbook.core.retry import RetryPolicy, fetch_with_retry
from hourbook.core.validation import finite_number

logger = get_logger("hourbook.timetracker.logs")

TABLE = "daily_logs"


def _clean_descriptions(work_description: Sequence[str]) -> List[str]:
    if isinstance(work_description, str):
        work_description = [work_description]
    cleaned = [d.strip() for d in work_description if d and d.strip()]
    if not cleaned:
        raise ValidationError("At least one work description is required")
    return cleaned


def _check_hours(hours_spent: float) -> float:
    hours = finite_number(hours_spent, "Hours spent")
    if hours <= 0:
        raise ValidationError("Hours spent must be positive")
    return hours


def _decode(row: Dict[str, Any]) -> Dict[str, Any]:
    log = dict(row)
    raw = log.get("work_description")
    log["work_description"] = json.loads(raw) if raw else []
    log["hours_spent"] = float(log["hours_spent"])
    return log


class LogStore:
    def __init__(
        self,
        records: RecordStore,
        identity: Identity,
        policy: Optional[RetryPolicy] = None,
    ):
        self._records = records
        self._identity = identity
        self._policy = policy

    def create_log(
        self,
        project_id: str,
        date: DateLike,
        hours_spent: float,
        work_description: Sequence[str],
    ) -> Dict[str, Any]:
        """Create a log authored by the signed-in user."""
        user_id = self._identity.require_user()
        row = {
            "id": new_id(),
            "project_id": project_id,
            "user_id": user_id,
            "date": to_date(date).isoformat(),
            "hours_spent": _check_hours(hours_spent),
            "work_description": json.dumps(_clean_descriptions(work_description)),
        }
        self._records.insert(TABLE, [row])
        logger.info("Logged %.2fh on %s for %s", row["hours_spent"], row["date"], user_id)
        return _decode(row)

    def update_log(
        self, log_id: str, hours_spent: float, work_description: Sequence[str]
    ) -> None:
        """Change hours and descriptions only."""
        values = {
            "hours_spent": _check_hours(hours_spent),
            "work_description": json.dumps(_clean_descriptions(work_description)),
        }
        if self._records.update(TABLE, values, filters={"id": log_id}) == 0:
            raise NotFoundError("daily log", log_id)

    def delete_log(self, log_id: str) -> None:
        self._records.delete(TABLE, filters={"id": log_id})

    def get_log(self, log_id: str) -> Dict[str, Any]:
        row = fetch_with_retry(
            lambda: self._records.select_one(TABLE, filters={"id": log_id}),
            self._policy,
            label="get_log",
        )
        if row is None:
            raise NotFoundError("daily log", log_id)
        return _decode(row)

    def fetch_logs(
        self, project_id: str, start: DateLike, end: DateLike
    ) -> List[Dict[str, Any]]:
        """Logs for a project dated within [start, end], ascending by date."""
        start_key, end_key = to_date(start).isoformat(), to_date(end).isoformat()
        rows = fetch_with_retry(
            lambda: self._records.select_range(
                TABLE,
                "date",
                start_key,
                end_key,
                filters={"project_id": project_id},
            ),
            self._policy,
            label="fetch_logs",
        )
        return [_decode(r) for r in rows]

    def fetch_month(self, project_id: str, month: DateLike) -> List[Dict[str, Any]]:
        return self.fetch_logs(project_id, month_start(month), month_end(month))
