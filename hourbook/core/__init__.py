"""
Hourbook Core - Shared services for all modules.

Usage:
    from hourbook.core import get_db, get_config, get_logger, RecordStore, fetch_with_retry
"""

from hourbook.core.config import get_config, get_config_value, HOURBOOK_PATHS
from hourbook.core.db import get_db, migrate_all
from hourbook.core.logging import get_logger
from hourbook.core.records import RecordStore, new_id
from hourbook.core.retry import RetryPolicy, fetch_with_retry

__all__ = [
    "get_config",
    "get_config_value",
    "HOURBOOK_PATHS",
    "get_db",
    "migrate_all",
    "get_logger",
    "RecordStore",
    "new_id",
    "RetryPolicy",
    "fetch_with_retry",
]
