"""
Hourbook - project hours against monthly budgets

Tracks daily time logs, per-month budgets and per-member hourly rates, and
lets a manager pre-allocate member hours within the remaining budget.

Modules:
    core        - Shared services (config, db, records, retry, logging, errors)
    auth        - Current identity and user profiles
    projects    - Projects, team members, monthly budgets, monthly allocations
    timetracker - Daily logs, working-day calendar, reconciliation, editor
    cli         - Typer command line
"""

__version__ = "0.1.0"
