"""Lifecycle hooks for the attendance collection.

Each hook fetches the state it needs (event, parent account) and then hands
it to the pure guards in ``transitions`` and ``events.lock_guard``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, List

from ..common.datetime_utils import now_utc
from ..common.validators import parse_enum, require_int
from ..core.enums import AttendanceStatus, Collection, Operation, Role
from ..core.exceptions import AuthorizationError, NotFoundError, RelationshipViolationError, ValidationError
from ..events.lock_guard import check_attendance_write
from ..events.model import Event
from ..events.repository import EventRepository
from ..platform.hooks import HookContext, HookRegistry, HookStage
from ..users.repository import UserRepository
from .transitions import check_transition, stamp_audit


def visible_to_parent(records: Iterable[Any], player_ids: Iterable[int]) -> List[Any]:
    """Keep only records that belong to one of the parent's children."""
    children = set(player_ids)
    return [r for r in records if r.player_id in children]


class AttendanceHooks:
    def __init__(
        self,
        events: EventRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._events = events
        self._users = users
        self._clock = clock

    def register(self, registry: HookRegistry) -> None:
        registry.register(Collection.ATTENDANCE, HookStage.BEFORE_VALIDATE, self.before_validate)
        registry.register(Collection.ATTENDANCE, HookStage.BEFORE_CHANGE, self.before_change)
        registry.register(Collection.ATTENDANCE, HookStage.AFTER_READ, self.after_read)

    def _event_for(self, ctx: HookContext) -> Event:
        event_id = ctx.merged("event_id")
        if event_id is None:
            raise ValidationError("Missing eventId")
        event = self._events.get_by_id(require_int(event_id, "eventId"))
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    def _children_of(self, parent_id: int) -> tuple:
        parent = self._users.get_by_id(int(parent_id))
        if parent is None:
            raise RelationshipViolationError("Unable to verify parent-child relationship")
        return parent.player_ids

    def before_validate(self, ctx: HookContext):
        data = dict(ctx.data)
        for key, label in (("event_id", "eventId"), ("player_id", "playerId")):
            if data.get(key) is not None:
                data[key] = require_int(data[key], label)
        if "status" in data:
            data["status"] = parse_enum(AttendanceStatus, data["status"], "status")
        if ctx.operation == Operation.CREATE:
            if data.get("player_id") is None:
                raise ValidationError("Missing playerId")
            data.setdefault("status", AttendanceStatus.PENDING)
        elif "event_id" in data or "player_id" in data:
            # Records are addressed by (event, player); the pair itself is immutable.
            if ctx.merged("event_id") != ctx.original.event_id or ctx.merged("player_id") != ctx.original.player_id:
                raise ValidationError("eventId and playerId cannot be changed")

        ctx.data = data
        check_attendance_write(ctx.role, self._event_for(ctx))
        return data

    def before_change(self, ctx: HookContext):
        # The event is fetched again so a lock taken since before_validate still applies.
        event = self._event_for(ctx)

        if ctx.operation == Operation.UPDATE and ctx.role == Role.PARENT:
            if ctx.original.player_id not in self._children_of(ctx.actor_id):
                raise RelationshipViolationError("Parents can only modify their own children's attendance")

        target = ctx.merged("status", AttendanceStatus.PENDING)
        check_transition(ctx.role, target, event_locked=event.locked)

        if ctx.actor is None:
            return ctx.data
        return stamp_audit(ctx.data, actor_id=ctx.actor_id, now=self._clock())

    def after_read(self, ctx: HookContext):
        if ctx.role != Role.PARENT:
            return None

        children = self._children_of(ctx.actor_id)
        if ctx.single:
            if ctx.docs and ctx.docs[0].player_id not in children:
                raise AuthorizationError("Access denied")
            return None
        return visible_to_parent(ctx.docs, children)
