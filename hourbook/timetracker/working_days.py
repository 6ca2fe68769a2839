"""
Working-Days Oracle

Month totals come from the ``get_month_working_days`` procedure and are
cached per month key for the life of the oracle. Elapsed working days to
a date are always fetched fresh and never raise.
"""

from datetime import date
from threading import Lock
from typing import Callable, Dict, Optional

from hourbook.core.dates import DateLike, month_key, month_start, to_date
from hourbook.core.errors import HourbookError, NoDataError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore
from hourbook.core.retry import RetryPolicy, fetch_with_retry

logger = get_logger("hourbook.timetracker.working_days")


class WorkingDaysOracle:
    def __init__(
        self,
        records: RecordStore,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._records = records
        self._policy = policy
        self._sleep = sleep
        self._cache: Dict[str, int] = {}
        self._lock = Lock()

    def cached(self, month: DateLike) -> Optional[int]:
        """Cached total for the month, or None if not fetched yet."""
        with self._lock:
            return self._cache.get(month_key(month))

    def working_days_in_month(self, month: DateLike) -> int:
        """
        Working days in the month of ``month``.

        A month the calendar has no rows for counts as 0 and is logged, not
        raised; it is not cached so a later calendar import shows up. Other
        failures propagate after retries.
        """
        key = month_key(month)
        with self._lock:
            if key in self._cache:
                return self._cache[key]

        kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
        try:
            days = fetch_with_retry(
                lambda: self._records.call("get_month_working_days", month_date=key),
                self._policy,
                label=f"working_days[{key}]",
                **kwargs,
            )
        except NoDataError as exc:
            logger.warning("No working-day data for %s: %s", key, exc)
            return 0

        days = int(days or 0)
        with self._lock:
            self._cache[key] = days
        return days

    def elapsed_working_days_to_date(self, as_of: Optional[DateLike] = None) -> int:
        """Working days from the first of the month through ``as_of``; 0 on any failure."""
        end = to_date(as_of) if as_of is not None else date.today()
        start = month_start(end)
        try:
            days = self._records.call(
                "calculate_working_days", start_date=start, end_date=end
            )
        except HourbookError as exc:
            logger.warning("Could not calculate working days to %s: %s", end, exc)
            return 0
        return int(days or 0)
