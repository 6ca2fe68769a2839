"""
Project Service

Project CRUD plus full-project hydration. Writes never re-read; callers
call hydrate_project()/refresh_all() after a successful write.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional, Sequence

from hourbook.auth.identity import Identity
from hourbook.core.concurrency import gather
from hourbook.core.errors import NotFoundError, ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore, new_id
from hourbook.core.retry import RetryPolicy, fetch_with_retry
from hourbook.projects.allocations import AllocationStore
from hourbook.projects.budgets import BudgetStore
from hourbook.projects.members import MemberStore

logger = get_logger("hourbook.projects.projects")

TABLE = "projects"


@dataclass
class ProjectDetails:
    """A project with its members, budgets and allocations."""

    project: Dict[str, Any]
    members: List[Dict[str, Any]] = field(default_factory=list)
    budgets: List[Dict[str, Any]] = field(default_factory=list)
    allocations: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.project["id"]

    @property
    def name(self) -> str:
        return self.project["name"]

    def rates(self) -> Dict[str, float]:
        return {m["user_id"]: float(m["rate_per_hour"]) for m in self.members}


class ProjectService:
    def __init__(
        self,
        records: RecordStore,
        identity: Identity,
        members: MemberStore,
        budgets: BudgetStore,
        allocations: AllocationStore,
        policy: Optional[RetryPolicy] = None,
        *,
        max_workers: int = 8,
    ):
        self._records = records
        self._identity = identity
        self.members = members
        self.budgets = budgets
        self.allocations = allocations
        self._policy = policy
        self._max_workers = max_workers

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_project(
        self, name: str, members: Sequence[Dict[str, Any]] = ()
    ) -> Dict[str, Any]:
        """
        Create a project owned by the signed-in user.

        Args:
            name: Display name
            members: Optional items with ``user_id`` and ``rate_per_hour``

        Returns:
            The project row
        """
        owner = self._identity.require_user()
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name is required")

        project = {"id": new_id(), "name": name, "created_by": owner}
        self._records.insert(TABLE, [project])
        for m in members:
            self.members.add_member(
                project["id"],
                m["user_id"],
                m.get("rate_per_hour", 0),
                m.get("monthly_hours_budget", 0),
            )
        logger.info("Created project %s (%s) for %s", project["id"], name, owner)
        return self.get_project(project["id"])

    def update_project(self, project_id: str, *, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name is required")
        if self._records.update(TABLE, {"name": name}, filters={"id": project_id}) == 0:
            raise NotFoundError("project", project_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Dict[str, Any]:
        row = fetch_with_retry(
            lambda: self._records.select_one(TABLE, filters={"id": project_id}),
            self._policy,
            label="get_project",
        )
        if row is None:
            raise NotFoundError("project", project_id)
        return row

    def list_projects(self) -> List[Dict[str, Any]]:
        return fetch_with_retry(
            lambda: self._records.select(TABLE, order_by="created_at"),
            self._policy,
            label="list_projects",
        )

    def hydrate_project(self, project_id: str) -> ProjectDetails:
        """Fetch a project and its sub-collections; any failed sub-fetch fails the whole read."""
        parts = gather(
            {
                "project": partial(self.get_project, project_id),
                "members": partial(self.members.list_members, project_id),
                "budgets": partial(self.budgets.list_budgets, project_id),
                "allocations": partial(self.allocations.list_allocations, project_id),
            },
            max_workers=self._max_workers,
        )
        return ProjectDetails(**parts)

    def refresh_all(self) -> List[ProjectDetails]:
        """Hydrate every project concurrently."""
        projects = self.list_projects()
        hydrated = gather(
            {p["id"]: partial(self.hydrate_project, p["id"]) for p in projects},
            max_workers=self._max_workers,
        )
        return [hydrated[p["id"]] for p in projects]
