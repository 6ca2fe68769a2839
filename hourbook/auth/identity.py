"""
Current-user identity holder.

Session handling lives outside Hourbook; this object only answers "who is
acting right now" for writes that stamp an author.
"""

from threading import Lock
from typing import Optional

from hourbook.core.errors import ValidationError
from hourbook.core.logging import get_logger

logger = get_logger("hourbook.auth.identity")


class Identity:
    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id
        self._lock = Lock()

    def current_user_id(self) -> Optional[str]:
        with self._lock:
            return self._user_id

    def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValidationError("User id is required")
        with self._lock:
            self._user_id = user_id
        logger.info("Signed in as %s", user_id)

    def sign_out(self) -> None:
        with self._lock:
            previous, self._user_id = self._user_id, None
        if previous:
            logger.info("Signed out %s", previous)

    def require_user(self) -> str:
        """Return the current user id or raise if nobody is signed in."""
        user_id = self.current_user_id()
        if not user_id:
            raise ValidationError("User not authenticated")
        return user_id
