from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.exceptions import ValidationError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_db_value(value: Any) -> Any:
    """Convert entity values to what mysql-connector expects.

    DATETIME columns hold naive UTC.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def build_where(where: Optional[Mapping[str, Any]], columns: Mapping[str, str]) -> Tuple[str, List[Any]]:
    """AND of equalities over allow-listed fields -> (' WHERE ...', params)."""
    clauses: List[str] = []
    params: List[Any] = []
    for key, value in (where or {}).items():
        column = columns.get(key)
        if column is None:
            raise ValidationError(f"Unsupported filter field: {key}")
        if value is None:
            clauses.append(f"{column} IS NULL")
            continue
        clauses.append(f"{column}=%s")
        params.append(to_db_value(value))
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def build_order(sort: Optional[str], columns: Mapping[str, str], default: str) -> str:
    if not sort:
        return f" ORDER BY {default}"
    desc = sort.startswith("-")
    column = columns.get(sort.lstrip("-"))
    if column is None:
        raise ValidationError(f"Unsupported sort field: {sort}")
    return f" ORDER BY {column} {'DESC' if desc else 'ASC'}"


def build_limit(limit: Optional[int]) -> Tuple[str, List[Any]]:
    if limit is None:
        return "", []
    return " LIMIT %s", [int(limit)]


def build_set(data: Mapping[str, Any], columns: Mapping[str, str]) -> Tuple[str, List[Any]]:
    """Allow-listed 'col=%s, ...' for UPDATE; unknown keys are ignored."""
    parts: List[str] = []
    params: List[Any] = []
    for key, value in data.items():
        column = columns.get(key)
        if column is None:
            continue
        parts.append(f"{column}=%s")
        params.append(to_db_value(value))
    return ", ".join(parts), params
