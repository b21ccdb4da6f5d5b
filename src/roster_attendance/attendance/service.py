from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..access.roles import Capability, has_capability
from ..common.validators import parse_enum, require_int
from ..core.constants import DEFAULT_EVENT_ATTENDANCE_LIMIT
from ..core.enums import AttendanceStatus, Collection, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..platform.service import DataPlatform, FindResult
from ..users.model import Actor
from ..users.repository import UserRepository
from .model import AttendanceRecord, EventSummary, SummaryRow
from .transitions import STAFF_ONLY_STATUSES

logger = logging.getLogger(__name__)

UNKNOWN_EVENT = "Unknown Event"
UNKNOWN_PLAYER = "Unknown Player"
UNKNOWN_USER = "Unknown User"


@dataclass
class BulkResult:
    """Per-item outcome of a bulk write; items never roll each other back."""

    total: int = 0
    results: List[dict] = field(default_factory=list)
    errors: List[dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_api(self, **extra: Any) -> dict:
        return {
            "success": self.success,
            **extra,
            "results": self.results,
            "errors": self.errors,
            "summary": {
                "total": self.total,
                "successful": len(self.results),
                "failed": len(self.errors),
            },
        }


def _require_actor(actor: Optional[Actor]) -> Actor:
    if actor is None:
        raise AuthenticationError("Unauthorized")
    return actor


def _require_staff_capability(actor: Optional[Actor], capability: Capability) -> Actor:
    actor = _require_actor(actor)
    if not has_capability(actor.role, capability):
        raise AuthorizationError("Forbidden - Admin or Trainer access required")
    return actor


def _item_error(e: Exception, *, what: str) -> str:
    if isinstance(e, DomainError):
        return str(e)
    logger.exception("unexpected error during %s", what)
    return "Unknown error"


class AttendanceService:
    """Use cases around attendance records: responding, bulk marking and reporting."""

    def __init__(self, platform: DataPlatform, users: UserRepository, events: EventRepository):
        self._platform = platform
        self._users = users
        self._events = events

    def list_for_event(self, *, actor: Optional[Actor], event_id: int, limit: Optional[int] = None) -> FindResult:
        _require_actor(actor)
        return self._platform.find(
            Collection.ATTENDANCE,
            actor=actor,
            where={"event_id": require_int(event_id, "eventId")},
            limit=limit or DEFAULT_EVENT_ATTENDANCE_LIMIT,
            sort="player_id",
        )

    def respond_for_event(
        self, *, actor: Optional[Actor], event_id: int, body: Mapping[str, Any]
    ) -> AttendanceRecord:
        """Set status/notes on the (event, player) record; players default to themselves."""
        actor = _require_actor(actor)
        player_id = body.get("playerId")
        if player_id is None and actor.role == Role.PLAYER:
            player_id = actor.user_id
        if player_id is None:
            raise ValidationError("Missing playerId")

        found = self._platform.find(
            Collection.ATTENDANCE,
            actor=actor,
            where={"event_id": require_int(event_id, "eventId"), "player_id": require_int(player_id, "playerId")},
            limit=1,
        )
        if not found.docs:
            raise NotFoundError("Attendance record not found")

        data = {}
        if "status" in body:
            data["status"] = body["status"]
        if "notes" in body:
            data["notes"] = body["notes"]
        return self._platform.update(Collection.ATTENDANCE, found.docs[0].attendance_id, data, actor=actor)

    def bulk_update(self, *, actor: Optional[Actor], updates: Any) -> BulkResult:
        actor = _require_staff_capability(actor, Capability.MARK_ATTENDANCE)
        if not isinstance(updates, list) or not updates:
            raise ValidationError("Invalid updates array")

        out = BulkResult(total=len(updates))
        for update in updates:
            item = update if isinstance(update, dict) else {}
            attendance_id = item.get("attendanceId")
            status = item.get("status")
            if not attendance_id or not status:
                out.errors.append({"update": update, "error": "Missing attendanceId or status"})
                continue

            try:
                record = self._platform.update(
                    Collection.ATTENDANCE,
                    require_int(attendance_id, "attendanceId"),
                    {"status": status, "notes": item.get("notes") or ""},
                    actor=actor,
                )
            except Exception as e:
                out.errors.append({"update": update, "error": _item_error(e, what="bulk attendance update")})
                continue
            out.results.append({"attendanceId": record.attendance_id, "success": True, "data": record.to_api()})
        return out

    def mark_all(
        self, *, actor: Optional[Actor], event_id: Any, status: Any, notes: Optional[str] = None
    ) -> BulkResult:
        """Mark every record of an event as attended or excused."""
        actor = _require_staff_capability(actor, Capability.MARK_ATTENDANCE)
        if not event_id or not status:
            raise ValidationError("Missing eventId or status")
        target = parse_enum(AttendanceStatus, status, "status")
        if target not in STAFF_ONLY_STATUSES:
            raise ValidationError("Invalid status for bulk operation")

        records = self._platform.find(
            Collection.ATTENDANCE,
            actor=actor,
            where={"event_id": require_int(event_id, "eventId")},
            limit=DEFAULT_EVENT_ATTENDANCE_LIMIT,
        )

        out = BulkResult(total=len(records.docs))
        data = {"status": target, "notes": notes or f"Bulk marked as {target.value}"}
        for record in records.docs:
            try:
                self._platform.update(Collection.ATTENDANCE, record.attendance_id, data, actor=actor)
            except Exception as e:
                out.errors.append(
                    {"attendanceId": record.attendance_id, "error": _item_error(e, what="bulk mark attendance")}
                )
                continue
            out.results.append({"attendanceId": record.attendance_id, "success": True})

        logger.info(
            "mark-all event=%s status=%s by=%s: %d/%d updated",
            event_id, target.value, actor.user_id, len(out.results), out.total,
        )
        return out

    def summary(self, *, actor: Optional[Actor], event_id: Optional[Any] = None) -> dict:
        """Per-event status counts plus the rows, most recently updated first."""
        actor = _require_staff_capability(actor, Capability.VIEW_SUMMARY)
        where = {"event_id": require_int(event_id, "eventId")} if event_id else {}
        found = self._platform.find(
            Collection.ATTENDANCE,
            actor=actor,
            where=where,
            limit=DEFAULT_EVENT_ATTENDANCE_LIMIT,
            sort="-updated_at",
        )

        names: Dict[int, str] = {}

        def user_name(user_id: int, unknown: str) -> str:
            if user_id not in names:
                user = self._users.get_by_id(int(user_id))
                names[user_id] = user.full_name if user else ""
            return names[user_id] or unknown

        groups: Dict[int, EventSummary] = {}
        for record in found.docs:
            group = groups.get(record.event_id)
            if group is None:
                event = self._events.get_by_id(record.event_id)
                group = EventSummary(
                    event_id=record.event_id,
                    event_name=event.name if event else UNKNOWN_EVENT,
                    event_date=event.date if event else None,
                )
                groups[record.event_id] = group

            group.add(
                SummaryRow(
                    attendance_id=record.attendance_id,
                    player_id=record.player_id,
                    player_name=user_name(record.player_id, UNKNOWN_PLAYER),
                    status=record.status,
                    notes=record.notes,
                    updated_at=record.updated_at,
                    updated_by=user_name(record.updated_by, UNKNOWN_USER),
                )
            )

        return {
            "summary": [g.to_api() for g in groups.values()],
            "totalRecords": found.total_docs,
        }
