from __future__ import annotations

import dataclasses
import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, Mapping, Optional, Set, Tuple

import pytest
from werkzeug.security import generate_password_hash

from roster_attendance.attendance.model import AttendanceRecord
from roster_attendance.container import wire
from roster_attendance.core.enums import AttendanceStatus, Role
from roster_attendance.events.model import Event
from roster_attendance.users.model import Actor

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
PASSWORD = "secret-pass-1"
PASSWORD_HASH = generate_password_hash(PASSWORD)


class InMemoryCollection:
    """Dict-backed stand-in for a MySQL repository (same method surface)."""

    entity_cls: Any = None
    id_field = "id"

    def __init__(self):
        self.rows: Dict[int, Any] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._fields = {f.name for f in dataclasses.fields(self.entity_cls)}

    def _prepare(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k in self._fields and k != self.id_field}

    def _check_unique(self, data: Mapping[str, Any], doc_id: Optional[int] = None) -> None:
        return None

    @staticmethod
    def _matches(doc, where) -> bool:
        return all(getattr(doc, k) == v for k, v in (where or {}).items())

    def find(self, *, where=None, limit=None, sort=None):
        docs = [d for d in self.rows.values() if self._matches(d, where)]
        if sort:
            key = sort.lstrip("-")
            docs.sort(key=lambda d: getattr(d, key), reverse=sort.startswith("-"))
        return docs[:limit] if limit is not None else docs

    def count(self, *, where=None) -> int:
        return len([d for d in self.rows.values() if self._matches(d, where)])

    def get_by_id(self, doc_id):
        return self.rows.get(int(doc_id))

    def create(self, data):
        with self._lock:
            fields = self._prepare(data)
            self._check_unique(fields)
            doc_id = self._next_id
            self._next_id += 1
            doc = self.entity_cls(**{self.id_field: doc_id, **fields})
            self.rows[doc_id] = doc
            return doc

    def update(self, doc_id, data):
        with self._lock:
            doc = dataclasses.replace(self.rows[int(doc_id)], **self._prepare(data))
            self.rows[int(doc_id)] = doc
            return doc

    def delete(self, doc_id) -> bool:
        return self.rows.pop(int(doc_id), None) is not None


class InMemoryUsers(InMemoryCollection):
    entity_cls = Actor
    id_field = "user_id"

    def _prepare(self, data):
        fields = super()._prepare(data)
        if "player_ids" in fields:
            fields["player_ids"] = tuple(fields["player_ids"] or ())
        return fields

    def get_by_email(self, email: str):
        return next((u for u in self.rows.values() if u.email == email.strip().lower()), None)

    def list_active_players(self, *, limit: int):
        return self.find(where={"role": Role.PLAYER, "active": True}, limit=limit, sort="user_id")

    def set_password(self, user_id: int, *, password_hash: str) -> bool:
        if int(user_id) not in self.rows:
            return False
        self.update(user_id, {"password_hash": password_hash})
        return True


class InMemoryEvents(InMemoryCollection):
    entity_cls = Event
    id_field = "event_id"

    def list_upcoming(self, *, since: datetime, limit: int):
        docs = sorted((e for e in self.rows.values() if e.date >= since), key=lambda e: e.date)
        return docs[:limit]


class InMemoryAttendance(InMemoryCollection):
    entity_cls = AttendanceRecord
    id_field = "attendance_id"

    def __init__(self):
        super().__init__()
        # (event_id, player_id) pairs whose insert should blow up
        self.fail_for: Set[Tuple[int, int]] = set()

    def _check_unique(self, data, doc_id=None):
        pair = (data["event_id"], data["player_id"])
        if pair in self.fail_for:
            raise RuntimeError(f"storage unavailable for {pair}")
        if any((r.event_id, r.player_id) == pair for r in self.rows.values()):
            raise RuntimeError(f"Duplicate entry for key 'uq_attendance_event_player': {pair}")

    def get_for_event_and_player(self, *, event_id: int, player_id: int):
        return next(
            (r for r in self.rows.values() if r.event_id == int(event_id) and r.player_id == int(player_id)),
            None,
        )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def repos():
    return SimpleNamespace(users=InMemoryUsers(), events=InMemoryEvents(), attendance=InMemoryAttendance())


@pytest.fixture
def container(repos):
    return wire(
        users_repo=repos.users,
        events_repo=repos.events,
        attendance_repo=repos.attendance,
        settings=SimpleNamespace(CASCADE_FETCH_LIMIT=1000, CASCADE_MAX_WORKERS=4),
        clock=lambda: NOW,
    )


@pytest.fixture
def platform(container):
    return container.platform


@pytest.fixture
def make_user(repos):
    """Insert an account straight into storage (no hooks, no cascade)."""

    def _make(role: Role, first_name: str, **extra) -> Actor:
        data = {
            "email": f"{first_name.lower()}@club.test",
            "first_name": first_name,
            "last_name": role.value.title(),
            "role": role,
            "password_hash": PASSWORD_HASH,
        }
        data.update(extra)
        return repos.users.create(data)

    return _make


@pytest.fixture
def people(repos, make_user):
    admin = make_user(Role.ADMIN, "Alice")
    trainer = make_user(Role.TRAINER, "Tina")
    player = make_user(Role.PLAYER, "Pete")
    other_player = make_user(Role.PLAYER, "Olga")
    parent = make_user(Role.PARENT, "Paula", player_ids=(player.user_id,))
    player = repos.users.update(player.user_id, {"parent_id": parent.user_id})
    return SimpleNamespace(admin=admin, trainer=trainer, player=player, other_player=other_player, parent=parent)


@pytest.fixture
def make_event(container, people):
    """Create an event through the platform as admin, so the cascade runs."""

    def _make(name: str = "Practice", *, days_ahead: int = 3, locked: bool = False, **extra) -> Event:
        body = {
            "name": name,
            "date": NOW + timedelta(days=days_ahead),
            "location": "Field 1",
            **extra,
        }
        event = container.event_service.create(actor=people.admin, body=body)
        if locked:
            event = container.event_service.lock(actor=people.admin, event_id=event.event_id)
        return event

    return _make


@pytest.fixture
def record_for(repos):
    def _get(event: Event, player: Actor) -> AttendanceRecord:
        return repos.attendance.get_for_event_and_player(event_id=event.event_id, player_id=player.user_id)

    return _get


@pytest.fixture
def set_status(repos, record_for):
    """Force a stored status, bypassing every guard."""

    def _set(event: Event, player: Actor, status: AttendanceStatus) -> AttendanceRecord:
        record = record_for(event, player)
        return repos.attendance.update(record.attendance_id, {"status": status})

    return _set


@pytest.fixture
def app(container):
    from roster_attendance.main import create_app

    return create_app("config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    def _login(user: Optional[Actor]) -> None:
        with client.session_transaction() as s:
            s.clear()
            if user is not None:
                s["user_id"] = user.user_id

    return _login
