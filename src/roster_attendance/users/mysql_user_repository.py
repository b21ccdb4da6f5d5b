from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import Role
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
from .model import Actor
from .repository import UserRepository

_SELECT = """
    SELECT
        u.user_id, u.email, u.first_name, u.last_name, u.role, u.password_hash,
        u.active, u.is_approved, u.parent_id, u.date_of_birth, u.phone_number,
        (SELECT GROUP_CONCAT(pp.player_id ORDER BY pp.player_id)
         FROM parent_players pp WHERE pp.parent_id = u.user_id) AS player_ids
    FROM users u
"""

_FILTER_COLUMNS = {
    "user_id": "u.user_id",
    "email": "u.email",
    "role": "u.role",
    "active": "u.active",
    "is_approved": "u.is_approved",
    "parent_id": "u.parent_id",
}

_SORT_COLUMNS = {
    "user_id": "u.user_id",
    "email": "u.email",
    "last_name": "u.last_name",
    "first_name": "u.first_name",
}

_WRITE_COLUMNS = {
    "email": "email",
    "first_name": "first_name",
    "last_name": "last_name",
    "role": "role",
    "password_hash": "password_hash",
    "active": "active",
    "is_approved": "is_approved",
    "parent_id": "parent_id",
    "date_of_birth": "date_of_birth",
    "phone_number": "phone_number",
}


def _row_to_actor(r: Mapping[str, Any]) -> Actor:
    raw_ids = r.get("player_ids") or ""
    return Actor(
        user_id=int(r["user_id"]),
        email=r["email"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        role=Role(r["role"]),
        password_hash=r.get("password_hash") or "",
        active=bool(r.get("active", True)),
        is_approved=bool(r.get("is_approved", True)),
        parent_id=int(r["parent_id"]) if r.get("parent_id") is not None else None,
        player_ids=tuple(int(x) for x in str(raw_ids).split(",") if x),
        date_of_birth=r.get("date_of_birth"),
        phone_number=r.get("phone_number"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, where=None, limit=None, sort=None) -> Sequence[Actor]:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        limit_sql, limit_params = build_limit(limit)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + where_sql + build_order(sort, _SORT_COLUMNS, "u.user_id ASC") + limit_sql,
                tuple(params + limit_params),
            )
            return [_row_to_actor(r) for r in fetchall(cur)]

    def count(self, *, where=None) -> int:
        where_sql, params = build_where(where, _FILTER_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users u" + where_sql, tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_by_id(self, doc_id: int) -> Optional[Actor]:
        found = self.find(where={"user_id": int(doc_id)}, limit=1)
        return found[0] if found else None

    def get_by_email(self, email: str) -> Optional[Actor]:
        found = self.find(where={"email": email.strip().lower()}, limit=1)
        return found[0] if found else None

    def list_active_players(self, *, limit: int) -> Sequence[Actor]:
        return self.find(where={"role": Role.PLAYER, "active": True}, limit=limit)

    @staticmethod
    def _replace_player_links(cur, parent_id: int, player_ids: Iterable[int]) -> None:
        cur.execute("DELETE FROM parent_players WHERE parent_id=%s", (int(parent_id),))
        for player_id in player_ids:
            cur.execute(
                "INSERT INTO parent_players(parent_id, player_id) VALUES(%s,%s)",
                (int(parent_id), int(player_id)),
            )

    def create(self, data: Mapping[str, Any]) -> Actor:
        columns = [c for k, c in _WRITE_COLUMNS.items() if k in data]
        values = [to_db_value(data[k]) for k in _WRITE_COLUMNS if k in data]
        placeholders = ",".join(["%s"] * len(columns))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO users({', '.join(columns)}) VALUES({placeholders})", tuple(values))
            user_id = int(cur.lastrowid)
            if data.get("player_ids"):
                self._replace_player_links(cur, user_id, data["player_ids"])

        created = self.get_by_id(user_id)
        if created is None:
            raise NotFoundError(f"users {user_id} not found after insert")
        return created

    def update(self, doc_id: int, data: Mapping[str, Any]) -> Actor:
        set_sql, params = build_set(data, _WRITE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            if set_sql:
                cur.execute(f"UPDATE users SET {set_sql} WHERE user_id=%s", tuple(params + [int(doc_id)]))
            if "player_ids" in data:
                self._replace_player_links(cur, int(doc_id), data["player_ids"] or ())

        updated = self.get_by_id(int(doc_id))
        if updated is None:
            raise NotFoundError(f"users {doc_id} not found")
        return updated

    def set_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def delete(self, doc_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(doc_id),))
            return cur.rowcount > 0
