"""
Service wiring.

Builds one set of explicitly injected stores around a single record store,
the way the CLI (or any other front end) consumes them. Nothing here is a
module-level singleton; every call returns a fresh, independent set.
"""

from dataclasses import dataclass
from typing import Optional

from hourbook.auth.identity import Identity
from hourbook.auth.profiles import ProfileStore
from hourbook.core.config import get_config_value
from hourbook.core.db import PathLike
from hourbook.core.records import RecordStore
from hourbook.core.retry import RetryPolicy
from hourbook.projects.allocations import AllocationStore
from hourbook.projects.budgets import BudgetStore
from hourbook.projects.members import MemberStore
from hourbook.projects.projects import ProjectService
from hourbook.timetracker.calendar import register_procedures
from hourbook.timetracker.logs import LogStore
from hourbook.timetracker.monthly import MonthlyReconciler
from hourbook.timetracker.working_days import WorkingDaysOracle


@dataclass
class Services:
    records: RecordStore
    identity: Identity
    profiles: ProfileStore
    members: MemberStore
    budgets: BudgetStore
    allocations: AllocationStore
    projects: ProjectService
    logs: LogStore
    working_days: WorkingDaysOracle
    reconciler: MonthlyReconciler


def create_services(
    db_path: Optional[PathLike] = None,
    *,
    user_id: Optional[str] = None,
    policy: Optional[RetryPolicy] = None,
    max_workers: Optional[int] = None,
) -> Services:
    """
    Wire every store around one record store.

    Args:
        db_path: Database file (default: destinations.database from config)
        user_id: Signed-in user, if any
        policy: Retry policy for reads (default: retry section of config)
        max_workers: Thread pool size for fan-out (default: concurrency.max_workers)
    """
    policy = policy or RetryPolicy.from_config()
    if max_workers is None:
        max_workers = int(get_config_value("concurrency", "max_workers", default=8))

    records = register_procedures(RecordStore(db_path))
    identity = Identity(user_id)
    members = MemberStore(records, policy)
    budgets = BudgetStore(records, policy)
    allocations = AllocationStore(records, policy, max_workers=max_workers)
    logs = LogStore(records, identity, policy)
    working_days = WorkingDaysOracle(records, policy)

    return Services(
        records=records,
        identity=identity,
        profiles=ProfileStore(records, policy),
        members=members,
        budgets=budgets,
        allocations=allocations,
        projects=ProjectService(
            records, identity, members, budgets, allocations, policy,
            max_workers=max_workers,
        ),
        logs=logs,
        working_days=working_days,
        reconciler=MonthlyReconciler(
            budgets, members, allocations, logs, working_days,
            max_workers=max_workers,
        ),
    )
