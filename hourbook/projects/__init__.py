"""
Hourbook Projects Module

Projects, team members and their hourly rates, monthly budgets and
monthly hour allocations.
"""

from hourbook.projects.allocations import AllocationRead, AllocationStore
from hourbook.projects.budgets import BudgetStore, nonzero_budgets
from hourbook.projects.members import MemberStore
from hourbook.projects.projects import ProjectDetails, ProjectService

__all__ = [
    "AllocationRead",
    "AllocationStore",
    "BudgetStore",
    "nonzero_budgets",
    "MemberStore",
    "ProjectDetails",
    "ProjectService",
]
