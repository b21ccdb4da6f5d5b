from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import AttendanceStatus
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
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT attendance_id, event_id, player_id, status, notes, updated_by, updated_at
    FROM attendance_records
"""

_FILTER_COLUMNS = {
    "attendance_id": "attendance_id",
    "event_id": "event_id",
    "player_id": "player_id",
    "status": "status",
}

_SORT_COLUMNS = {
    "attendance_id": "attendance_id",
    "updated_at": "updated_at",
    "event_id": "event_id",
    "player_id": "player_id",
}

_WRITE_COLUMNS = {
    "event_id": "event_id",
    "player_id": "player_id",
    "status": "status",
    "notes": "notes",
    "updated_by": "updated_by",
    "updated_at": "updated_at",
}


def _row_to_record(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        event_id=int(r["event_id"]),
        player_id=int(r["player_id"]),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        updated_by=int(r["updated_by"]),
        updated_at=as_utc(r["updated_at"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, where=None, limit=None, sort=None) -> Sequence[AttendanceRecord]:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        limit_sql, limit_params = build_limit(limit)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + where_sql + build_order(sort, _SORT_COLUMNS, "attendance_id ASC") + limit_sql,
                tuple(params + limit_params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count(self, *, where=None) -> int:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records" + where_sql, tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_by_id(self, doc_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE attendance_id=%s", (int(doc_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_event_and_player(self, *, event_id: int, player_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE event_id=%s AND player_id=%s",
                (int(event_id), int(player_id)),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, data: Mapping[str, Any]) -> AttendanceRecord:
        # uq_attendance_event_player rejects a second row for the same pair.
        columns = [c for k, c in _WRITE_COLUMNS.items() if k in data]
        values = [to_db_value(data[k]) for k in _WRITE_COLUMNS if k in data]
        placeholders = ",".join(["%s"] * len(columns))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO attendance_records({', '.join(columns)}) VALUES({placeholders})",
                tuple(values),
            )
            attendance_id = int(cur.lastrowid)

        created = self.get_by_id(attendance_id)
        if created is None:
            raise NotFoundError(f"attendance {attendance_id} not found after insert")
        return created

    def update(self, doc_id: int, data: Mapping[str, Any]) -> AttendanceRecord:
        set_sql, params = build_set(data, _WRITE_COLUMNS)
        if set_sql:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE attendance_records SET {set_sql} WHERE attendance_id=%s",
                    tuple(params + [int(doc_id)]),
                )

        updated = self.get_by_id(int(doc_id))
        if updated is None:
            raise NotFoundError(f"attendance {doc_id} not found")
        return updated

    def delete(self, doc_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(doc_id),))
            return cur.rowcount > 0
