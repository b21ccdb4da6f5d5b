"""Role model: each role is a flat bundle of capabilities (no inheritance)."""

from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, Mapping, Optional

from ..common.validators import parse_enum
from ..core.enums import Role


class Capability(str, Enum):
    MANAGE_EVENTS = "manage_events"
    LOCK_EVENTS = "lock_events"
    MANAGE_USERS = "manage_users"
    DELETE_RECORDS = "delete_records"
    MARK_ATTENDANCE = "mark_attendance"
    READ_ALL = "read_all"
    VIEW_SUMMARY = "view_summary"
    RESPOND_SELF = "respond_self"
    RESPOND_CHILDREN = "respond_children"


CAPABILITIES: Mapping[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(
        {
            Capability.MANAGE_EVENTS,
            Capability.LOCK_EVENTS,
            Capability.MANAGE_USERS,
            Capability.DELETE_RECORDS,
            Capability.MARK_ATTENDANCE,
            Capability.READ_ALL,
            Capability.VIEW_SUMMARY,
        }
    ),
    Role.TRAINER: frozenset(
        {
            Capability.MANAGE_EVENTS,
            Capability.LOCK_EVENTS,
            Capability.MARK_ATTENDANCE,
            Capability.READ_ALL,
            Capability.VIEW_SUMMARY,
        }
    ),
    Role.PLAYER: frozenset({Capability.RESPOND_SELF}),
    Role.PARENT: frozenset({Capability.RESPOND_CHILDREN}),
}

STAFF_ROLES = frozenset({Role.ADMIN, Role.TRAINER})
SELF_SERVICE_ROLES = frozenset({Role.PLAYER, Role.PARENT})


def has_capability(role: Optional[Role], capability: Capability) -> bool:
    if role is None:
        return False
    return capability in CAPABILITIES.get(role, frozenset())


def is_admin(role: Optional[Role]) -> bool:
    return role == Role.ADMIN


def is_staff(role: Optional[Role]) -> bool:
    return role in STAFF_ROLES


def parse_role(value: Any) -> Role:
    """Validate an untyped role value once, at the boundary."""
    return parse_enum(Role, value, "role")
