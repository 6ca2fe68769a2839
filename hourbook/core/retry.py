"""
Bounded exponential backoff for record-store reads.

Only ``TransientError`` is retried. Validation, not-found and any other
failure propagate on first occurrence. Writes do not go through here.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from hourbook.core.errors import TransientError
from hourbook.core.logging import get_logger

logger = get_logger("hourbook.core.retry")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_delay: float = 1.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Wait before the retry that follows failed ``attempt`` (1-based)."""
        return self.initial_delay * (2 ** (attempt - 1))

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        from hourbook.core.config import get_config_value

        return cls(
            max_attempts=int(get_config_value("retry", "max_attempts", default=3)),
            initial_delay=float(get_config_value("retry", "initial_delay", default=1.0)),
        )


DEFAULT_POLICY = RetryPolicy()


def fetch_with_retry(
    operation: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "fetch",
) -> T:
    """
    Run ``operation`` with retries on transient failures.

    With the default policy the operation runs at most three times, waiting
    1 then 2 time units between attempts.

    Args:
        operation: Zero-argument callable performing the read
        policy: Attempts and initial delay (default: 3 attempts, 1 second)
        sleep: Delay function, injectable for tests
        label: Name used in log lines

    Returns:
        Whatever ``operation`` returns
    """
    policy = policy or DEFAULT_POLICY
    attempt = 1
    while True:
        try:
            return operation()
        except TransientError as exc:
            if attempt >= policy.max_attempts:
                logger.error(
                    "%s failed after %d attempts: %s", label, attempt, exc
                )
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2fs",
                label, attempt, policy.max_attempts, exc, delay,
            )
            sleep(delay)
            attempt += 1
