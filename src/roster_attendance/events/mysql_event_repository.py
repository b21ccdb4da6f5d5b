from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import EventType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    build_limit,
    build_order,
    build_set,
    build_where,
    db_cursor,
    fetchall,
    fetchone,
    to_db_value,
)
from .model import Event
from .repository import EventRepository

_SELECT = """
    SELECT event_id, name, event_date, location, event_type, locked, description
    FROM events
"""

_FILTER_COLUMNS = {
    "event_id": "event_id",
    "type": "event_type",
    "locked": "locked",
    "location": "location",
}

_SORT_COLUMNS = {
    "event_id": "event_id",
    "date": "event_date",
    "name": "name",
}

_WRITE_COLUMNS = {
    "name": "name",
    "date": "event_date",
    "location": "location",
    "type": "event_type",
    "locked": "locked",
    "description": "description",
}


def _row_to_event(r: Mapping[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        name=r["name"],
        date=as_utc(r["event_date"]),
        location=r["location"],
        type=EventType(r["event_type"]),
        locked=bool(r.get("locked", False)),
        description=r.get("description"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, where=None, limit=None, sort=None) -> Sequence[Event]:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        limit_sql, limit_params = build_limit(limit)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + where_sql + build_order(sort, _SORT_COLUMNS, "event_date ASC") + limit_sql,
                tuple(params + limit_params),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def count(self, *, where=None) -> int:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM events" + where_sql, tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_by_id(self, doc_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE event_id=%s", (int(doc_id),))
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def list_upcoming(self, *, since: datetime, limit: int) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE event_date >= %s ORDER BY event_date ASC LIMIT %s",
                (to_db_value(since), int(limit)),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def create(self, data: Mapping[str, Any]) -> Event:
        columns = [c for k, c in _WRITE_COLUMNS.items() if k in data]
        values = [to_db_value(data[k]) for k in _WRITE_COLUMNS if k in data]
        placeholders = ",".join(["%s"] * len(columns))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO events({', '.join(columns)}) VALUES({placeholders})", tuple(values))
            event_id = int(cur.lastrowid)

        created = self.get_by_id(event_id)
        if created is None:
            raise NotFoundError(f"events {event_id} not found after insert")
        return created

    def update(self, doc_id: int, data: Mapping[str, Any]) -> Event:
        set_sql, params = build_set(data, _WRITE_COLUMNS)
        if set_sql:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE events SET {set_sql} WHERE event_id=%s", tuple(params + [int(doc_id)]))

        updated = self.get_by_id(int(doc_id))
        if updated is None:
            raise NotFoundError(f"events {doc_id} not found")
        return updated

    def delete(self, doc_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(doc_id),))
            return cur.rowcount > 0
