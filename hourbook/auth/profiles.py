"""
User profiles: display names for team members.

Reads are retried; fetched profiles are merged into an in-memory map owned
by the store instance.
"""

from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from hourbook.core.errors import ValidationError
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore
from hourbook.core.retry import RetryPolicy, fetch_with_retry

logger = get_logger("hourbook.auth.profiles")


class ProfileStore:
    def __init__(self, records: RecordStore, policy: Optional[RetryPolicy] = None):
        self._records = records
        self._policy = policy
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def create_profile(
        self, user_id: str, email: str, full_name: Optional[str] = None
    ) -> Dict[str, Any]:
        if not user_id or not email:
            raise ValidationError("Profile needs a user id and an email")
        row = {"id": user_id, "email": email.strip(), "full_name": full_name}
        self._records.insert("profiles", [row])
        with self._lock:
            self._profiles[user_id] = row
        return row

    def fetch_profiles(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Load profiles for ``user_ids`` and merge them into the cache."""
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        rows = fetch_with_retry(
            lambda: self._records.select("profiles", in_filters={"id": ids}),
            self._policy,
            label="fetch_profiles",
        )
        fetched = {r["id"]: r for r in rows}
        with self._lock:
            self._profiles.update(fetched)
        return fetched

    def list_profiles(self) -> List[Dict[str, Any]]:
        return fetch_with_retry(
            lambda: self._records.select("profiles", order_by="email"),
            self._policy,
            label="list_profiles",
        )

    def available_users(self, member_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Profiles not already on the project, ordered by email."""
        taken = set(member_ids)
        return [p for p in self.list_profiles() if p["id"] not in taken]

    def display_name(self, user_id: str) -> str:
        """Full name, else email, else the raw user id."""
        with self._lock:
            profile = self._profiles.get(user_id)
        if not profile:
            return user_id
        return profile.get("full_name") or profile.get("email") or user_id
