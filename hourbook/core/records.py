"""
Record store adapter.

Table-level operations (select, range select, insert, upsert, update,
delete) and named remote procedures over the Hourbook sqlite database.
Stores talk to this class only; sqlite failures are translated into the
Hourbook error taxonomy here so the retry layer can tell transport trouble
from rejected input.
"""

import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional, Sequence, Tuple

from hourbook.core.db import PathLike, get_db, get_db_path
from hourbook.core.errors import (
    HourbookError,
    NotFoundError,
    StoreError,
    TransportError,
    ValidationError,
)
from hourbook.core.logging import get_logger

logger = get_logger("hourbook.core.records")

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")

# OperationalError messages that mean "could not reach the data", not "bad query"
_TRANSIENT_MARKERS = ("locked", "busy", "unable to open", "disk i/o")

Procedure = Callable[..., Any]
Filters = Optional[Dict[str, Any]]
InFilters = Optional[Dict[str, Iterable[Any]]]


def new_id() -> str:
    """Generate a record id."""
    return str(uuid.uuid4())


def translate_error(exc: sqlite3.Error) -> HourbookError:
    """Map a sqlite error onto the Hourbook taxonomy."""
    message = str(exc)
    if isinstance(exc, sqlite3.IntegrityError):
        return ValidationError(message)
    if isinstance(exc, sqlite3.OperationalError):
        lowered = message.lower()
        if any(marker in lowered for marker in _TRANSIENT_MARKERS):
            return TransportError(message)
    return StoreError(message)


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid identifier: {name!r}")
    return name


def _param(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value


def _where(filters: Filters, in_filters: InFilters) -> Tuple[str, List[Any]]:
    conditions: List[str] = []
    params: List[Any] = []
    for column, value in (filters or {}).items():
        if value is None:
            conditions.append(f"{_ident(column)} IS NULL")
        else:
            conditions.append(f"{_ident(column)} = ?")
            params.append(_param(value))
    for column, values in (in_filters or {}).items():
        values = [_param(v) for v in values]
        if not values:
            conditions.append("1 = 0")
            continue
        placeholders = ",".join("?" for _ in values)
        conditions.append(f"{_ident(column)} IN ({placeholders})")
        params.extend(values)
    if not conditions:
        return "", params
    return " WHERE " + " AND ".join(conditions), params


def _insert_statement(table: str, row: Dict[str, Any]) -> Tuple[str, List[Any]]:
    columns = [_ident(c) for c in row]
    placeholders = ",".join("?" for _ in columns)
    sql = f"INSERT INTO {_ident(table)} ({','.join(columns)}) VALUES ({placeholders})"
    return sql, [_param(v) for v in row.values()]


def _order(order_by: Optional[str], descending: bool) -> str:
    if not order_by:
        return ""
    return f" ORDER BY {_ident(order_by)} {'DESC' if descending else 'ASC'}"


class RecordStore:
    """
    Generic record store over one sqlite database file.

    Args:
        db_path: Database file (default: destinations.database from config)
        procedures: Remote procedures by name, each ``fn(conn, **params)``
    """

    def __init__(
        self,
        db_path: Optional[PathLike] = None,
        procedures: Optional[Dict[str, Procedure]] = None,
    ):
        self.db_path = Path(db_path) if db_path is not None else get_db_path()
        self._procedures: Dict[str, Procedure] = dict(procedures or {})

    def register_procedure(self, name: str, fn: Procedure) -> None:
        self._procedures[name] = fn

    @contextmanager
    def connect(self, readonly: bool = False) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection; sqlite errors leave as Hourbook errors."""
        try:
            with get_db(self.db_path, readonly=readonly) as conn:
                yield conn
        except sqlite3.Error as exc:
            raise translate_error(exc) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def select(
        self,
        table: str,
        *,
        filters: Filters = None,
        in_filters: InFilters = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        where, params = _where(filters, in_filters)
        sql = f"SELECT * FROM {_ident(table)}{where}{_order(order_by, descending)}"
        with self.connect(readonly=True) as conn:
            return [dict(r) for r in conn.execute(sql, params).fetchall()]

    def select_one(self, table: str, *, filters: Filters = None) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters=filters)
        return rows[0] if rows else None

    def select_range(
        self,
        table: str,
        column: str,
        start: Any = None,
        end: Any = None,
        *,
        filters: Filters = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Rows whose ``column`` lies in the inclusive range [start, end]."""
        where, params = _where(filters, None)
        conditions = [where[len(" WHERE "):]] if where else []
        if start is not None:
            conditions.append(f"{_ident(column)} >= ?")
            params.append(_param(start))
        if end is not None:
            conditions.append(f"{_ident(column)} <= ?")
            params.append(_param(end))
        sql = f"SELECT * FROM {_ident(table)}"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += _order(order_by or column, descending)
        with self.connect(readonly=True) as conn:
            return [dict(r) for r in conn.execute(sql, params).fetchall()]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, table: str, rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert all rows in one transaction. Returns the rows as sent."""
        if not rows:
            return []
        with self.connect() as conn:
            for row in rows:
                conn.execute(*_insert_statement(table, row))
            conn.commit()
        return [dict(r) for r in rows]

    def upsert(
        self, table: str, row: Dict[str, Any], conflict: Sequence[str]
    ) -> Dict[str, Any]:
        """Insert ``row``, overwriting the existing row that shares ``conflict`` columns."""
        columns = [_ident(c) for c in row]
        keys = [_ident(c) for c in conflict]
        updates = [c for c in columns if c not in keys and c != "id"]
        placeholders = ",".join("?" for _ in columns)
        sql = (
            f"INSERT INTO {_ident(table)} ({','.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT ({','.join(keys)}) "
        )
        if updates:
            sql += "DO UPDATE SET " + ", ".join(f"{c} = excluded.{c}" for c in updates)
        else:
            sql += "DO NOTHING"
        with self.connect() as conn:
            conn.execute(sql, [_param(v) for v in row.values()])
            conn.commit()
        return dict(row)

    def replace(
        self,
        table: str,
        rows: Sequence[Dict[str, Any]],
        *,
        filters: Filters = None,
        in_filters: InFilters = None,
    ) -> List[Dict[str, Any]]:
        """
        Delete rows matching the filters and insert ``rows`` in one transaction.

        A failed insert rolls the delete back.
        """
        if not filters and not in_filters:
            raise ValidationError(f"Refusing unfiltered replace on {table}")
        where, params = _where(filters, in_filters)
        with self.connect() as conn:
            conn.execute(f"DELETE FROM {_ident(table)}{where}", params)
            for row in rows:
                conn.execute(*_insert_statement(table, row))
            conn.commit()
        return [dict(r) for r in rows]

    def update(self, table: str, values: Dict[str, Any], *, filters: Dict[str, Any]) -> int:
        """Update rows matching ``filters``. Returns the affected row count."""
        if not filters:
            raise ValidationError(f"Refusing unfiltered update on {table}")
        if not values:
            return 0
        assignments = ", ".join(f"{_ident(c)} = ?" for c in values)
        where, params = _where(filters, None)
        with self.connect() as conn:
            cursor = conn.execute(
                f"UPDATE {_ident(table)} SET {assignments}{where}",
                [_param(v) for v in values.values()] + params,
            )
            conn.commit()
            return cursor.rowcount

    def delete(
        self, table: str, *, filters: Filters = None, in_filters: InFilters = None
    ) -> int:
        """Delete rows matching the filters. Absence is not an error."""
        if not filters and not in_filters:
            raise ValidationError(f"Refusing unfiltered delete on {table}")
        where, params = _where(filters, in_filters)
        with self.connect() as conn:
            cursor = conn.execute(f"DELETE FROM {_ident(table)}{where}", params)
            conn.commit()
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Remote procedures
    # ------------------------------------------------------------------

    def call(self, procedure: str, **params: Any) -> Any:
        """Invoke a registered procedure with ISO-formatted parameters."""
        fn = self._procedures.get(procedure)
        if fn is None:
            raise NotFoundError("procedure", procedure)
        with self.connect(readonly=True) as conn:
            return fn(conn, **{k: _param(v) for k, v in params.items()})
