"""Role-gated setter for ``AttendanceRecord.status``.

This is a flat permission table, not a graph: the rules look at the actor's
role, the requested status and the event lock, never at the current status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, MutableMapping, Optional

from ..access.roles import SELF_SERVICE_ROLES, is_admin, is_staff
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ForbiddenTransitionError, LockedEventError

SELF_SERVICE_STATUSES = frozenset({AttendanceStatus.ATTENDING, AttendanceStatus.DECLINED})
STAFF_ONLY_STATUSES = frozenset({AttendanceStatus.ATTENDED, AttendanceStatus.EXCUSED})


def check_transition(role: Optional[Role], target: AttendanceStatus, *, event_locked: bool) -> None:
    """Raise if ``role`` may not set ``target``; rules apply in order."""
    if event_locked and not is_admin(role):
        raise LockedEventError("Cannot modify attendance for a locked event. Contact an administrator.")

    if role in SELF_SERVICE_ROLES and target not in SELF_SERVICE_STATUSES:
        raise ForbiddenTransitionError('Players and parents can only set status to "attending" or "declined"')

    if not is_staff(role) and target in STAFF_ONLY_STATUSES:
        raise ForbiddenTransitionError('Only trainers and admins can mark attendance as "attended" or "excused"')


def can_set_status(role: Optional[Role], target: AttendanceStatus, *, event_locked: bool) -> bool:
    try:
        check_transition(role, target, event_locked=event_locked)
    except (LockedEventError, ForbiddenTransitionError):
        return False
    return True


def stamp_audit(data: MutableMapping[str, Any], *, actor_id: int, now: datetime) -> Dict[str, Any]:
    """Overwrite the audit fields, whatever the client sent."""
    data["updated_by"] = int(actor_id)
    data["updated_at"] = now
    return dict(data)
