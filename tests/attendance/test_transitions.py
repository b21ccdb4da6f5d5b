from __future__ import annotations

from datetime import datetime, timezone

import pytest

from roster_attendance.attendance.transitions import can_set_status, check_transition, stamp_audit
from roster_attendance.core.enums import AttendanceStatus, Role
from roster_attendance.core.exceptions import ForbiddenTransitionError, LockedEventError

SELF_SERVICE = [Role.PLAYER, Role.PARENT]
STAFF = [Role.ADMIN, Role.TRAINER]


@pytest.mark.parametrize("role", SELF_SERVICE)
@pytest.mark.parametrize("target", [AttendanceStatus.ATTENDED, AttendanceStatus.EXCUSED, AttendanceStatus.PENDING])
def test_self_service_roles_cannot_set_other_statuses(role, target):
    with pytest.raises(ForbiddenTransitionError):
        check_transition(role, target, event_locked=False)


@pytest.mark.parametrize("role", SELF_SERVICE)
@pytest.mark.parametrize("target", [AttendanceStatus.ATTENDING, AttendanceStatus.DECLINED])
def test_self_service_roles_can_respond(role, target):
    check_transition(role, target, event_locked=False)


@pytest.mark.parametrize("role", STAFF)
@pytest.mark.parametrize("target", list(AttendanceStatus))
def test_staff_can_set_any_status_on_open_event(role, target):
    # No transition graph: attended -> pending is as valid as pending -> attended.
    check_transition(role, target, event_locked=False)


@pytest.mark.parametrize("role", [Role.TRAINER, Role.PLAYER, Role.PARENT, None])
@pytest.mark.parametrize("target", list(AttendanceStatus))
def test_locked_event_rejects_everyone_but_admin(role, target):
    with pytest.raises(LockedEventError):
        check_transition(role, target, event_locked=True)


@pytest.mark.parametrize("target", list(AttendanceStatus))
def test_admin_overrides_lock(target):
    check_transition(Role.ADMIN, target, event_locked=True)


def test_lock_is_checked_before_the_status_rules():
    # A player asking for "excused" on a locked event hears about the lock first.
    with pytest.raises(LockedEventError):
        check_transition(Role.PLAYER, AttendanceStatus.EXCUSED, event_locked=True)


def test_anonymous_cannot_mark_attended():
    with pytest.raises(ForbiddenTransitionError):
        check_transition(None, AttendanceStatus.ATTENDED, event_locked=False)


def test_can_set_status_is_the_boolean_form():
    assert can_set_status(Role.TRAINER, AttendanceStatus.EXCUSED, event_locked=False)
    assert not can_set_status(Role.PLAYER, AttendanceStatus.EXCUSED, event_locked=False)
    assert not can_set_status(Role.TRAINER, AttendanceStatus.EXCUSED, event_locked=True)


def test_stamp_audit_overwrites_client_values():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    data = {"status": AttendanceStatus.ATTENDED, "updated_by": 999, "updated_at": "yesterday"}

    stamped = stamp_audit(data, actor_id=4, now=now)

    assert stamped == {"status": AttendanceStatus.ATTENDED, "updated_by": 4, "updated_at": now}
