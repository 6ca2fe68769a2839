"""Month and date helpers shared by the stores and the reconciler."""

from calendar import monthrange
from datetime import date, datetime
from typing import List, Union

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string (YYYY-MM-DD...) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_start(value: DateLike) -> date:
    d = to_date(value)
    return d.replace(day=1)


def month_end(value: DateLike) -> date:
    d = to_date(value)
    return d.replace(day=monthrange(d.year, d.month)[1])


def month_key(value: DateLike) -> str:
    """Normalized month key, e.g. '2026-03-01'."""
    return month_start(value).isoformat()


def add_months(value: DateLike, months: int) -> date:
    """First day of the month ``months`` after the month of ``value``."""
    d = month_start(value)
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_range(start: DateLike, count: int) -> List[date]:
    """``count`` consecutive month starts beginning with the month of ``start``."""
    return [add_months(start, i) for i in range(count)]


def same_month(a: DateLike, b: DateLike) -> bool:
    return month_start(a) == month_start(b)
