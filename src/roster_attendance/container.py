from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.hooks import AttendanceHooks
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.provisioning import AttendanceProvisioner
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_CASCADE_FETCH_LIMIT, DEFAULT_CASCADE_MAX_WORKERS
from .core.enums import Collection
from .database.connection import DBConfig, DatabaseConnection
from .events.hooks import EventHooks
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .platform.hooks import HookRegistry
from .platform.service import DataPlatform
from .users.hooks import UserHooks
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    events_repo: EventRepository
    attendance_repo: AttendanceRepository

    hooks: HookRegistry
    platform: DataPlatform
    provisioner: AttendanceProvisioner

    auth_service: AuthService
    user_service: UserService
    event_service: EventService
    attendance_service: AttendanceService


def wire(
    *,
    users_repo: UserRepository,
    events_repo: EventRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
    settings: Any = None,
    clock=None,
) -> Container:
    """Assemble services on top of any set of repositories."""
    extra = {"clock": clock} if clock is not None else {}

    provisioner = AttendanceProvisioner(
        attendance_repo,
        users_repo,
        events_repo,
        fetch_limit=int(getattr(settings, "CASCADE_FETCH_LIMIT", DEFAULT_CASCADE_FETCH_LIMIT)),
        max_workers=int(getattr(settings, "CASCADE_MAX_WORKERS", DEFAULT_CASCADE_MAX_WORKERS)),
        **extra,
    )

    hooks = HookRegistry()
    UserHooks(users_repo, provisioner).register(hooks)
    EventHooks(provisioner).register(hooks)
    AttendanceHooks(events_repo, users_repo, **extra).register(hooks)

    platform = DataPlatform(
        {
            Collection.USERS: users_repo,
            Collection.EVENTS: events_repo,
            Collection.ATTENDANCE: attendance_repo,
        },
        hooks,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        hooks=hooks,
        platform=platform,
        provisioner=provisioner,
        auth_service=AuthService(users_repo),
        user_service=UserService(platform, users_repo),
        event_service=EventService(platform),
        attendance_service=AttendanceService(platform, users_repo, events_repo),
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
        settings=settings,
    )
