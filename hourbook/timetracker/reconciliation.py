"""
Allocation Reconciliation

Pure derivations over one project-month: spend, budget progress, maximum
allocatable hours per member, remaining budget under a proposed allocation,
and pacing against elapsed working days. No I/O; the monthly reconciler
fetches the inputs and calls summarize_month().

Formulas:
    spend          = sum(log.hours_spent * rate[log.user_id])   unrated users cost 0
    percentage     = spend / budget * 100 if budget > 0 else 0   (not clamped)
    max_hours      = floor(budget / rate)                        rate <= 0 -> UNBOUNDED
    remaining      = budget - sum(allocation[u] * rate[u] for rated u)
    target_to_date = allocated * elapsed / total                 total == 0 -> no pacing
"""

from dataclasses import dataclass, field
from enum import Enum
from math import floor, isfinite
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from hourbook.projects.allocations import AllocationRead


class Cap(str, Enum):
    """Sentinel for a maximum that cannot be computed (zero rate)."""

    UNBOUNDED = "unbounded"


MaxHours = Union[int, Cap]

NO_WORKING_DAYS = "no working days set"


# ---------------------------------------------------------------------------
# Input normalization
# ---------------------------------------------------------------------------


def normalize_allocations(
    allocations: Mapping[str, Union[AllocationRead, float, None]],
) -> Dict[str, float]:
    """Collapse tagged allocation reads to hours, "not set" becoming 0."""
    hours: Dict[str, float] = {}
    for user_id, value in allocations.items():
        if isinstance(value, AllocationRead):
            value = value.hours
        hours[user_id] = float(value) if value is not None else 0.0
    return hours


def hours_by_user(logs: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """Total logged hours per user, in first-seen order."""
    totals: Dict[str, float] = {}
    for log in logs:
        totals[log["user_id"]] = totals.get(log["user_id"], 0.0) + float(log["hours_spent"])
    return totals


# ---------------------------------------------------------------------------
# Derivations
# ---------------------------------------------------------------------------


def compute_spend(logs: Iterable[Mapping[str, Any]], rates: Mapping[str, float]) -> float:
    return sum(
        float(log["hours_spent"]) * float(rates.get(log["user_id"], 0.0))
        for log in logs
    )


def budget_percentage(spend: float, budget: float) -> float:
    if budget <= 0:
        return 0.0
    return spend / budget * 100


def progress_bar_width(percentage: float) -> float:
    """Display width of the progress bar, clamped to [0, 100]."""
    return max(0.0, min(percentage, 100.0))


def max_hours(budget: float, rate: float) -> MaxHours:
    if rate <= 0:
        return Cap.UNBOUNDED
    hours = budget / rate
    if not isfinite(hours):
        return Cap.UNBOUNDED
    return int(floor(hours))


def max_hours_by_user(budget: float, rates: Mapping[str, float]) -> Dict[str, MaxHours]:
    return {user_id: max_hours(budget, rate) for user_id, rate in rates.items()}


def allocation_cost(allocations: Mapping[str, float], rates: Mapping[str, float]) -> float:
    """Cost of an allocation over the rated members only."""
    return sum(float(allocations.get(u, 0) or 0) * float(rate) for u, rate in rates.items())


def remaining_budget(
    budget: float, allocations: Mapping[str, float], rates: Mapping[str, float]
) -> float:
    return budget - allocation_cost(allocations, rates)


@dataclass(frozen=True)
class Pacing:
    hours_logged: float
    allocated: float
    target_to_date: float
    daily_target: float
    daily_actual: Optional[float]

    @property
    def delta(self) -> float:
        """Logged minus target; positive means ahead."""
        return self.hours_logged - self.target_to_date

    @property
    def on_track(self) -> bool:
        return self.hours_logged >= self.target_to_date


def pacing(
    hours_logged: float, allocated: float, elapsed_days: int, total_days: int
) -> Optional[Pacing]:
    """Logged hours against the allocated share of elapsed working days.

    Returns None when the month has no working days.
    """
    if total_days <= 0:
        return None
    return Pacing(
        hours_logged=hours_logged,
        allocated=allocated,
        target_to_date=allocated * elapsed_days / total_days,
        daily_target=allocated / total_days,
        daily_actual=hours_logged / elapsed_days if elapsed_days > 0 else None,
    )


# ---------------------------------------------------------------------------
# Month summary
# ---------------------------------------------------------------------------


@dataclass
class MonthSummary:
    month_date: str
    budget: float
    spend: float
    percentage: float
    bar_width: float
    over_budget: bool
    total_working_days: int
    elapsed_working_days: int
    is_current_month: bool
    allocated: Dict[str, float] = field(default_factory=dict)
    remaining_budget: float = 0.0
    max_hours: Dict[str, MaxHours] = field(default_factory=dict)
    hours_logged: Dict[str, float] = field(default_factory=dict)
    pacing: Dict[str, Optional[Pacing]] = field(default_factory=dict)

    @property
    def working_days_label(self) -> str:
        if self.total_working_days <= 0:
            return NO_WORKING_DAYS
        if self.is_current_month:
            return f"{self.elapsed_working_days}/{self.total_working_days}"
        return f"{self.total_working_days} days"


def summarize_month(
    *,
    month_date: str,
    budget: float,
    rates: Mapping[str, float],
    allocations: Mapping[str, Union[AllocationRead, float, None]],
    logs: Iterable[Mapping[str, Any]],
    total_working_days: int,
    elapsed_working_days: int,
    is_current_month: bool,
) -> MonthSummary:
    """
    Derive every figure shown for one project-month.

    Pacing is only reported for the current month and only once the month
    has elapsed working days; other members map to None.
    """
    logs = list(logs)
    allocated = normalize_allocations(allocations)
    spend = compute_spend(logs, rates)
    percentage = budget_percentage(spend, budget)
    logged = hours_by_user(logs)

    pace: Dict[str, Optional[Pacing]] = {}
    for user_id, hours in logged.items():
        if is_current_month and elapsed_working_days > 0:
            pace[user_id] = pacing(
                hours, allocated.get(user_id, 0.0), elapsed_working_days, total_working_days
            )
        else:
            pace[user_id] = None

    return MonthSummary(
        month_date=month_date,
        budget=budget,
        spend=spend,
        percentage=percentage,
        bar_width=progress_bar_width(percentage),
        over_budget=percentage > 100,
        total_working_days=total_working_days,
        elapsed_working_days=elapsed_working_days,
        is_current_month=is_current_month,
        allocated=allocated,
        remaining_budget=remaining_budget(budget, allocated, rates),
        max_hours=max_hours_by_user(budget, rates),
        hours_logged=logged,
        pacing=pace,
    )
