"""Lock guard for events and their attendance records.

A locked event freezes itself and every attendance record under it; only an
admin can edit it (or unlock it). Deletion needs an unlock first, even for
admins.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..access.roles import Capability, has_capability, is_admin
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, LockedEventError
from .model import Event


def check_attendance_write(role: Optional[Role], event: Event) -> None:
    if event.locked and not is_admin(role):
        raise LockedEventError("Cannot modify attendance for a locked event. Contact an administrator.")


def _changes_anything(stored: Event, changes: Mapping[str, Any]) -> bool:
    return any(getattr(stored, key, None) != value for key, value in changes.items())


def check_event_update(role: Optional[Role], stored: Event, changes: Mapping[str, Any]) -> None:
    """Non-admins may not modify a locked event in any field.

    A change set that leaves every field as stored (e.g. locking an already
    locked event) is not a modification.
    """
    if stored.locked and not is_admin(role) and _changes_anything(stored, changes):
        raise LockedEventError("Event is locked. Only an administrator can edit or unlock it.")


def check_event_delete(event: Event) -> None:
    if event.locked:
        raise LockedEventError("Cannot delete a locked event. Unlock it first.")


def check_lock_toggle(role: Optional[Role]) -> None:
    """Lock and unlock requests are limited to staff.

    A trainer passes this gate for an unlock, but check_event_update then refuses them.
    """
    if not has_capability(role, Capability.LOCK_EVENTS):
        raise AuthorizationError("Insufficient permissions")
