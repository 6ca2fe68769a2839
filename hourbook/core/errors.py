"""
Error taxonomy for Hourbook.

Every error carries a machine-readable ``code`` so callers (CLI, editor)
can branch on type instead of message text.

    HourbookError
    +-- TransientError
    |   +-- TransportError      (retried by fetch_with_retry)
    +-- NoDataError             (treated as zero/empty by tolerant readers)
    +-- NotFoundError
    +-- ValidationError         (never retried)
    +-- BatchError              (one or more fan-out operations failed)
    +-- StoreError              (any other persistence failure)
"""

from typing import List, Optional, Sequence


class HourbookError(Exception):
    """Base class for all Hourbook errors."""

    code: str = "HOURBOOK_ERROR"


class TransientError(HourbookError):
    """Failure expected to clear on its own; safe to retry reads."""

    code = "TRANSIENT"


class TransportError(TransientError):
    """The record store could not be reached."""

    code = "TRANSPORT"


class NoDataError(HourbookError):
    """No rows cover the requested range."""

    code = "NO_DATA"


class NotFoundError(HourbookError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class ValidationError(HourbookError):
    """Rejected input or an unauthenticated stamped write."""

    code = "VALIDATION"


class BatchError(HourbookError):
    """One or more operations of a fan-out write failed.

    Only the failures are reported; callers re-read to learn what persisted.
    """

    code = "BATCH_FAILED"

    def __init__(self, errors: Sequence[BaseException], total: Optional[int] = None):
        self.errors: List[BaseException] = list(errors)
        self.total = total
        detail = f"{len(self.errors)} of {total}" if total is not None else str(len(self.errors))
        super().__init__(f"Batch failed: {detail} operations did not complete")


class StoreError(HourbookError):
    code = "STORE"
