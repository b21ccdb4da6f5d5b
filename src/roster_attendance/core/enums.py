from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles used for authorization."""

    ADMIN = "admin"
    TRAINER = "trainer"
    PLAYER = "player"
    PARENT = "parent"


class AttendanceStatus(str, Enum):
    """Attendance status as stored and sent over the wire."""

    PENDING = "pending"
    ATTENDING = "attending"
    DECLINED = "declined"
    ATTENDED = "attended"
    EXCUSED = "excused"


class EventType(str, Enum):
    PRACTICE = "practice"
    GAME = "game"
    TOURNAMENT = "tournament"
    MEETING = "meeting"


class Collection(str, Enum):
    """Collections exposed by the data platform."""

    USERS = "users"
    EVENTS = "events"
    ATTENDANCE = "attendance"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
