"""
Working-Day Calendar

The calendar collaborator behind the two remote procedures
``get_month_working_days`` and ``calculate_working_days``. Calendar rows
(one per date, flagged working or not) are seeded per month from a
weekday rule minus holidays.
"""

import sqlite3
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from hourbook.core.config import get_calendar_weekdays
from hourbook.core.dates import DateLike, month_end, month_start, to_date
from hourbook.core.errors import NoDataError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import Procedure, RecordStore

logger = get_logger("hourbook.timetracker.calendar")

TABLE = "calendar_days"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_working_dates(
    start_date: date,
    end_date: date,
    *,
    weekdays: Sequence[int] = (0, 1, 2, 3, 4),
    holidays: Iterable[date] = (),
) -> List[date]:
    """Working dates in [start_date, end_date] by weekday rule, minus holidays."""
    skip = {to_date(h) for h in holidays}
    dates = []
    current = start_date
    while current <= end_date:
        if current.weekday() in weekdays and current not in skip:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def _count_working(conn: sqlite3.Connection, start: str, end: str) -> int:
    row = conn.execute(
        f"SELECT COUNT(*) AS known, COALESCE(SUM(is_working), 0) AS working "
        f"FROM {TABLE} WHERE day >= ? AND day <= ?",
        (start, end),
    ).fetchone()
    if not row["known"]:
        raise NoDataError(f"no rows in calendar for {start} .. {end}")
    return int(row["working"])


# ---------------------------------------------------------------------------
# Remote procedures
# ---------------------------------------------------------------------------


def get_month_working_days(conn: sqlite3.Connection, *, month_date: str) -> int:
    """Working days in the month containing ``month_date``."""
    start = month_start(month_date)
    return _count_working(conn, start.isoformat(), month_end(start).isoformat())


def calculate_working_days(
    conn: sqlite3.Connection, *, start_date: str, end_date: str
) -> int:
    """Working days in the inclusive range [start_date, end_date]."""
    start, end = to_date(start_date), to_date(end_date)
    if start > end:
        raise ValidationError(f"start_date {start} is after end_date {end}")
    return _count_working(conn, start.isoformat(), end.isoformat())


PROCEDURES: Dict[str, Procedure] = {
    "get_month_working_days": get_month_working_days,
    "calculate_working_days": calculate_working_days,
}


def register_procedures(records: RecordStore) -> RecordStore:
    for name, fn in PROCEDURES.items():
        records.register_procedure(name, fn)
    return records


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


def seed_calendar(
    records: RecordStore,
    month: DateLike,
    *,
    weekdays: Optional[Sequence[int]] = None,
    holidays: Iterable[DateLike] = (),
) -> int:
    """
    Write one calendar row per date of a month.

    Existing rows for the month are overwritten. Weekdays default to
    calendar.weekdays from config.yaml.

    Returns:
        Number of working days written for the month
    """
    start = month_start(month)
    end = month_end(start)
    weekdays = tuple(weekdays) if weekdays is not None else tuple(get_calendar_weekdays())
    holiday_dates = {to_date(h) for h in holidays}
    working = set(get_working_dates(start, end, weekdays=weekdays, holidays=holiday_dates))

    current = start
    while current <= end:
        note = "holiday" if current in holiday_dates else None
        records.upsert(
            TABLE,
            {"day": current.isoformat(), "is_working": 1 if current in working else 0, "note": note},
            ("day",),
        )
        current += timedelta(days=1)

    logger.info("Seeded calendar for %s: %d working days", start.isoformat(), len(working))
    return len(working)
