"""
Database access for Hourbook.

Connection management and schema migration for the sqlite file that backs
the record store.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union
from urllib.parse import quote

from hourbook.core.config import HOURBOOK_PATHS

PathLike = Union[str, Path]


def get_db_path() -> Path:
    """Get database path from config."""
    return HOURBOOK_PATHS.database


@contextmanager
def get_db(
    db_path: Optional[PathLike] = None, readonly: bool = False
) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Enables foreign keys and Row factory automatically.

    Args:
        db_path: Database file (default: destinations.database from config)
        readonly: Open in read-only mode

    Yields:
        sqlite3.Connection with Row factory enabled
    """
    path = Path(db_path) if db_path is not None else get_db_path()

    if readonly:
        conn = sqlite3.connect(
            f"file:{quote(path.as_posix(), safe='/:')}?mode=ro", uri=True, timeout=5.0
        )
    else:
        conn = sqlite3.connect(str(path), timeout=5.0)

    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


# Foreign keys flow downhill through this list.
SCHEMA_ORDER = [
    "auth",
    "projects",
    "timetracker",
]


def migrate_all(db_path: Optional[PathLike] = None) -> None:
    """
    Apply every module schema in dependency order.

    Each schema.sql uses CREATE TABLE IF NOT EXISTS, so this is safe to
    run repeatedly.
    """
    from hourbook.core.logging import get_logger

    logger = get_logger("hourbook.migrate")
    package_dir = Path(__file__).parent.parent
    path = Path(db_path) if db_path is not None else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with get_db(path) as conn:
        for module_name in SCHEMA_ORDER:
            schema_file = package_dir / module_name / "schema.sql"
            if schema_file.exists():
                logger.debug("Applying schema: %s/schema.sql", module_name)
                conn.executescript(schema_file.read_text(encoding="utf-8"))
            else:
                logger.debug("No schema for module: %s", module_name)
        conn.commit()
    logger.info("All schemas applied to %s", path)
